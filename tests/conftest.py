"""Pytest fixtures for testing"""

import pytest
from datetime import date, time
from decimal import Decimal
from typing import Any, Dict, List
from rental_settlement.domain.models import ContractReturnFacts


@pytest.fixture
def return_facts() -> ContractReturnFacts:
    """Three-day contract returned late, low on fuel and over the mileage allowance"""
    return ContractReturnFacts(
        contract_end_date=date(2024, 1, 10),
        return_date=date(2024, 1, 12),
        return_time=time(10, 0),
        daily_rate=Decimal("100"),
        start_mileage=10000,
        end_mileage=10800,  # 800 km driven, 600 km allowed
        allowed_km_per_day=200,
        contract_days=3,
        fuel_level_start="full",
        fuel_level_end="1/2",
        contract_start_date=date(2024, 1, 7),
        deposit_amount=Decimal("1000"),
        damage_fee=Decimal("150"),
        cleaning_fee=Decimal("50"),
    )


@pytest.fixture
def return_row() -> Dict[str, Any]:
    """Same close-out as return_facts, as the contract provider hands it over"""
    return {
        "contract_end_date": "2024-01-10",
        "actual_return_date": "2024-01-12",
        "return_time": "10:00",
        "daily_rate": "100",
        "mileage_start": 10000,
        "mileage_end": 10800,
        "allowed_km_per_day": 200,
        "contract_days": 3,
        "fuel_level_start": "full",
        "fuel_level_end": "1/2",
        "start_date": "2024-01-07",
        "deposit_amount": 1000,
        "damage_charges": 150,
        "cleaning_charges": 50,
        "customer_name": "ignored extra column",
    }


@pytest.fixture
def arrears_rows() -> List[Dict[str, Any]]:
    """Aggregation provider rows: three customers over 1500 with overdue contracts"""
    return [
        {
            "id": "cust_small",
            "name": "Small Debtor",
            "total_contracted": "2500",
            "total_paid": "500",
            "active_contracts": 1,
            "overdue_contracts": 1,
            "oldest_overdue_date": "2024-02-20",  # 10 days before as_of → inside grace
        },
        {
            "id": "cust_current",
            "name": "Paid Up",
            "total_contracted": "9000",
            "total_paid": "9000",
            "active_contracts": 2,
            "overdue_contracts": 0,
        },
        {
            "id": "cust_large",
            "name": "Large Debtor",
            "total_contracted": "15000",
            "total_paid": "2000",
            "active_contracts": 2,
            "overdue_contracts": 2,
            "oldest_overdue_date": "2024-01-01",  # 60 days before as_of → 46 overdue
        },
        {
            "id": "cust_mid",
            "name": "Mid Debtor",
            "outstanding_balance": "6000",
            "total_contracted": "8000",
            "total_paid": "2000",
            "active_contracts": 1,
            "overdue_contracts": 1,
            "oldest_overdue_date": "2024-02-01",  # 29 days before as_of → 15 overdue
        },
    ]
