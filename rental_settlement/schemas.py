"""Pydantic schemas for rows handed over by external data providers"""

from datetime import date, time
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rental_settlement.domain.models import (
    ContractReturnFacts,
    CustomerArrearsSummary,
    FiscalInvoiceFields,
)


class ContractReturnRecord(BaseModel):
    """Contract close-out row from the contract/return data provider"""

    model_config = ConfigDict(extra="ignore")

    contract_end_date: Optional[date] = None
    actual_return_date: Optional[date] = None
    return_time: Optional[time] = None
    daily_rate: Optional[Decimal] = Field(None, ge=0)
    mileage_start: Optional[int] = None
    mileage_end: Optional[int] = None
    allowed_km_per_day: Optional[int] = None
    contract_days: Optional[int] = None
    fuel_level_start: Union[int, float, str, None] = None
    fuel_level_end: Union[int, float, str, None] = None
    start_date: Optional[date] = None
    deposit_amount: Optional[Decimal] = None
    damage_charges: Optional[Decimal] = None
    cleaning_charges: Optional[Decimal] = None
    other_charges: Optional[Decimal] = None

    def to_facts(self) -> ContractReturnFacts:
        return ContractReturnFacts(
            contract_end_date=self.contract_end_date,
            return_date=self.actual_return_date,
            return_time=self.return_time,
            daily_rate=self.daily_rate,
            start_mileage=self.mileage_start,
            end_mileage=self.mileage_end,
            allowed_km_per_day=self.allowed_km_per_day,
            contract_days=self.contract_days,
            fuel_level_start=self.fuel_level_start,
            fuel_level_end=self.fuel_level_end,
            contract_start_date=self.start_date,
            deposit_amount=self.deposit_amount,
            damage_fee=self.damage_charges,
            cleaning_fee=self.cleaning_charges,
            other_fees=self.other_charges,
        )


class InvoiceFieldsRecord(BaseModel):
    """Seller identity and totals from the invoice field provider"""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    seller_name: str = ""
    vat_number: str = ""
    timestamp: str = ""
    total_with_vat: str = ""
    vat_amount: str = ""

    def to_fields(self) -> FiscalInvoiceFields:
        return FiscalInvoiceFields(**self.model_dump())


class ArrearsSummaryRecord(BaseModel):
    """One pre-aggregated row per customer from the arrears aggregation provider"""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Customer identifier")
    name: Optional[str] = None
    total_contracted: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    outstanding_balance: Optional[Decimal] = None
    active_contracts: int = Field(0, ge=0)
    overdue_contracts: int = Field(0, ge=0)
    oldest_overdue_date: Optional[date] = None

    def to_summary(self) -> CustomerArrearsSummary:
        return CustomerArrearsSummary(
            customer_id=self.id,
            customer_name=self.name,
            total_contracted=self.total_contracted,
            total_paid=self.total_paid,
            outstanding_balance=self.outstanding_balance,
            active_contracts=self.active_contracts,
            overdue_contracts=self.overdue_contracts,
            oldest_overdue_date=self.oldest_overdue_date,
        )
