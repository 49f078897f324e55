"""Settlement engine - charges owed when a rental contract is closed out"""

import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from rental_settlement.domain.models import (
    ContractReturnFacts,
    FuelLabel,
    FuelLevel,
    SettlementResult,
)
from rental_settlement.utils.date_utils import (
    DateLike,
    TimeLike,
    ceil_days,
    end_of_day,
    parse_date,
    parse_time,
)

ZERO = Decimal("0")
FUEL_INCREMENT = 25  # one quarter tank, in percent
DEFAULT_PRICE_PER_QUARTER = Decimal("50")
DEFAULT_PRICE_PER_EXCESS_KM = Decimal("0.5")

Amount = Union[Decimal, int, float, str, None]


def to_amount(value: Amount) -> Optional[Decimal]:
    """Normalise a currency/number input to Decimal, None when missing or unparseable"""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def late_fee(
    contract_end_date: DateLike,
    return_date: DateLike,
    return_time: TimeLike,
    daily_rate: Amount,
) -> Decimal:
    """
    Fee for returning the vehicle after the contract's due instant.

    The contract is due at 23:59:59 on its end date. Lateness is billed in
    whole days, rounded up, so one second late costs a full day's rate.

    Example:
        due 2024-01-10 23:59:59, returned 2024-01-12 10:00
        → 1 day 10h 1s late → 2 days × 100 = 200
    """
    rate = to_amount(daily_rate)
    end = parse_date(contract_end_date)
    returned_on = parse_date(return_date)
    returned_at = parse_time(return_time)

    # Settlement never blocks a return: missing inputs charge nothing
    if not rate or rate < 0 or end is None or returned_on is None or returned_at is None:
        return ZERO

    due = end_of_day(end)
    actual = datetime.combine(returned_on.date(), returned_at.replace(tzinfo=None))
    if actual <= due:
        return ZERO

    return ceil_days(actual - due) * rate


def to_fuel_percentage(level: FuelLevel) -> Decimal:
    """Resolve a gauge label or raw percentage to a percentage; unknown labels are empty"""
    if isinstance(level, FuelLabel):
        return Decimal(level.percentage)
    if isinstance(level, str):
        try:
            return Decimal(FuelLabel(level.strip().lower()).percentage)
        except ValueError:
            return ZERO
    amount = to_amount(level)
    return amount if amount is not None else ZERO


def fuel_charge(
    start_level: FuelLevel,
    end_level: FuelLevel,
    price_per_quarter: Amount = DEFAULT_PRICE_PER_QUARTER,
) -> Decimal:
    """
    Charge for fuel missing at return, billed per started quarter tank.

    Examples:
        full → 1/2: 50% missing → 2 quarters × 50 = 100
        26% missing → 2 quarters (partial quarter rounds up)
    """
    price = to_amount(price_per_quarter)
    if not price or price < 0:
        return ZERO

    difference = to_fuel_percentage(start_level) - to_fuel_percentage(end_level)
    if difference <= 0:
        return ZERO

    quarters = math.ceil(difference / FUEL_INCREMENT)
    return quarters * price


def mileage_charge(
    start_mileage: Optional[int],
    end_mileage: Optional[int],
    allowed_km_per_day: Optional[int],
    days: Optional[int],
    price_per_excess_km: Amount = DEFAULT_PRICE_PER_EXCESS_KM,
) -> Decimal:
    """Charge for kilometres driven beyond the daily allowance over the contract"""
    values = [to_amount(v) for v in (start_mileage, end_mileage, allowed_km_per_day, days)]
    price = to_amount(price_per_excess_km)
    if any(not v for v in values) or not price or price < 0:
        return ZERO

    start, end, per_day, contract_days = values
    actual_km = end - start
    allowed_km = per_day * contract_days
    excess_km = actual_km - allowed_km
    if excess_km <= 0:
        return ZERO

    return excess_km * price


def contract_duration_days(start_date: DateLike, end_date: DateLike) -> int:
    """Days between two dates, any partial day rounded up; argument order does not matter"""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return 0
    return ceil_days(abs(end - start))


def distance_traveled(start_mileage: Optional[int], end_mileage: Optional[int]) -> int:
    """Whole kilometres driven between the two odometer readings, 0 when either is unusable"""
    start = to_amount(start_mileage)
    end = to_amount(end_mileage)
    if start is None or end is None:
        return 0
    return max(0, int(end - start))


def deposit_refund(deposit_amount: Amount, total_charges: Amount) -> Decimal:
    """Security deposit left after charges are deducted (never negative)"""
    deposit = to_amount(deposit_amount)
    if not deposit:
        return ZERO
    charges = to_amount(total_charges) or ZERO
    return max(ZERO, deposit - charges)


def calculate_settlement(
    facts: ContractReturnFacts,
    price_per_quarter: Amount = DEFAULT_PRICE_PER_QUARTER,
    price_per_excess_km: Amount = DEFAULT_PRICE_PER_EXCESS_KM,
) -> SettlementResult:
    """
    Main entry point: compute every charge owed for a returned vehicle.

    Returns SettlementResult with late, fuel and mileage charges, the other
    fees recorded at inspection, and what is left of the deposit.
    """
    late = late_fee(facts.contract_end_date, facts.return_date, facts.return_time, facts.daily_rate)
    fuel = fuel_charge(facts.fuel_level_start, facts.fuel_level_end, price_per_quarter)
    mileage = mileage_charge(
        facts.start_mileage,
        facts.end_mileage,
        facts.allowed_km_per_day,
        facts.contract_days,
        price_per_excess_km,
    )

    if facts.contract_start_date is not None and facts.contract_end_date is not None:
        duration = contract_duration_days(facts.contract_start_date, facts.contract_end_date)
    else:
        days = to_amount(facts.contract_days)
        duration = int(days) if days and days > 0 else 0

    additional = sum(
        (max(ZERO, to_amount(fee) or ZERO) for fee in (facts.damage_fee, facts.cleaning_fee, facts.other_fees)),
        ZERO,
    )

    result = SettlementResult(
        late_fee_amount=late,
        fuel_charge_amount=fuel,
        mileage_charge_amount=mileage,
        contract_duration_days=duration,
        distance_traveled=distance_traveled(facts.start_mileage, facts.end_mileage),
        additional_charges=additional,
    )
    result.deposit_refund = deposit_refund(facts.deposit_amount, result.total_charges)
    return result
