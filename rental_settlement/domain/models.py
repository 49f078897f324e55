"""Domain models - pure Python dataclasses representing settlement and arrears entities"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class FuelLabel(Enum):
    """Canonical fuel gauge labels recorded at handover and return"""

    EMPTY = "empty"
    QUARTER = "1/4"
    HALF = "1/2"
    THREE_QUARTERS = "3/4"
    FULL = "full"

    @property
    def percentage(self) -> int:
        return _FUEL_PERCENTAGES[self]


_FUEL_PERCENTAGES = {
    FuelLabel.EMPTY: 0,
    FuelLabel.QUARTER: 25,
    FuelLabel.HALF: 50,
    FuelLabel.THREE_QUARTERS: 75,
    FuelLabel.FULL: 100,
}

# Either a gauge label or a raw percentage (0-100)
FuelLevel = Union[FuelLabel, str, int, float, Decimal, None]


class CollectionActionType(str, Enum):
    LEGAL_COLLECTION = "legal_collection"
    VEHICLE_REPOSSESSION = "vehicle_repossession"
    FINAL_NOTICE = "final_notice"
    CONTACT_CUSTOMER = "contact_customer"


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"


class RiskStatus(str, Enum):
    HIGH_RISK = "high_risk"
    MEDIUM_RISK = "medium_risk"
    LOW_RISK = "low_risk"
    GOOD_STANDING = "good_standing"


@dataclass(frozen=True)
class ContractReturnFacts:
    """Facts captured when a vehicle comes back at contract close-out"""

    contract_end_date: Optional[date]
    return_date: Optional[date]
    return_time: Optional[time]
    daily_rate: Optional[Decimal]
    start_mileage: Optional[int]
    end_mileage: Optional[int]
    allowed_km_per_day: Optional[int]
    contract_days: Optional[int]
    fuel_level_start: FuelLevel
    fuel_level_end: FuelLevel
    contract_start_date: Optional[date] = None
    deposit_amount: Optional[Decimal] = None
    damage_fee: Optional[Decimal] = None
    cleaning_fee: Optional[Decimal] = None
    other_fees: Optional[Decimal] = None


@dataclass
class SettlementResult:
    """Charges owed at vehicle return"""

    late_fee_amount: Decimal
    fuel_charge_amount: Decimal
    mileage_charge_amount: Decimal
    contract_duration_days: int
    distance_traveled: int
    additional_charges: Decimal = Decimal("0")
    deposit_refund: Decimal = Decimal("0")

    @property
    def total_charges(self) -> Decimal:
        return (
            self.late_fee_amount
            + self.fuel_charge_amount
            + self.mileage_charge_amount
            + self.additional_charges
        )


@dataclass
class FiscalInvoiceFields:
    """The five fields embedded in a tax-invoice QR code, in tag order"""

    seller_name: str
    vat_number: str
    timestamp: str  # ISO-8601
    total_with_vat: str  # e.g. "115.00"
    vat_amount: str  # e.g. "15.00"


@dataclass
class CustomerArrearsSummary:
    """Pre-aggregated contract/payment totals for one customer"""

    customer_id: str
    total_contracted: Decimal
    total_paid: Decimal
    active_contracts: int
    overdue_contracts: int
    oldest_overdue_date: Optional[date] = None
    outstanding_balance: Optional[Decimal] = None
    customer_name: Optional[str] = None
    risk_status: Optional[RiskStatus] = None

    def __post_init__(self) -> None:
        # Upstream may omit the balance; it is always contracted minus paid
        if self.outstanding_balance is None:
            self.outstanding_balance = self.total_contracted - self.total_paid


@dataclass(frozen=True)
class CollectionAction:
    """Single recommended step in a collection escalation plan"""

    action: CollectionActionType
    title: str
    description: str
    priority: Priority


@dataclass
class ArrearsMetrics:
    """Portfolio-level view over customers in arrears"""

    total_arrears: Decimal
    customers_count: int
    average_amount: Decimal
    critical_cases: int
