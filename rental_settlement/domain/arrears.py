"""Arrears risk engine - at-risk customer selection and collection escalation"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from rental_settlement.domain.models import (
    ArrearsMetrics,
    CollectionAction,
    CollectionActionType,
    CustomerArrearsSummary,
    Priority,
    RiskStatus,
)
from rental_settlement.utils.date_utils import ceil_days, parse_date

DEFAULT_ARREARS_THRESHOLD = Decimal("1500")
DEFAULT_GRACE_DAYS = 14
CRITICAL_AMOUNT = Decimal("5000")
HIGH_RISK_AMOUNT = Decimal("10000")

ActionText = Mapping[CollectionActionType, Tuple[str, str]]

DEFAULT_ACTION_TEXT: Dict[CollectionActionType, Tuple[str, str]] = {
    CollectionActionType.LEGAL_COLLECTION: (
        "Start legal collection",
        "Balance overdue 30+ days; refer the account for legal recovery.",
    ),
    CollectionActionType.VEHICLE_REPOSSESSION: (
        "Repossess vehicle",
        "Balance overdue 15+ days; recover any vehicle still on hire.",
    ),
    CollectionActionType.FINAL_NOTICE: (
        "Send final notice",
        "Balance overdue 7+ days; issue a formal final payment notice.",
    ),
    CollectionActionType.CONTACT_CUSTOMER: (
        "Contact customer",
        "Call or message the customer to agree a payment date.",
    ),
}

# (minimum overdue days, action, priority) in descending severity
ESCALATION_LADDER = (
    (30, CollectionActionType.LEGAL_COLLECTION, Priority.URGENT),
    (15, CollectionActionType.VEHICLE_REPOSSESSION, Priority.HIGH),
    (7, CollectionActionType.FINAL_NOTICE, Priority.HIGH),
)


def is_at_risk(summary: CustomerArrearsSummary, threshold: Decimal = DEFAULT_ARREARS_THRESHOLD) -> bool:
    return summary.outstanding_balance > threshold and summary.overdue_contracts > 0


def select_at_risk(
    summaries: Iterable[CustomerArrearsSummary],
    threshold: Decimal = DEFAULT_ARREARS_THRESHOLD,
) -> List[CustomerArrearsSummary]:
    """
    Customers owing more than the threshold with at least one overdue contract.

    Sorted by outstanding balance, largest first; equal balances keep the
    order they were supplied in.
    """
    flagged = [s for s in summaries if is_at_risk(s, threshold)]
    return sorted(flagged, key=lambda s: s.outstanding_balance, reverse=True)


def build_collection_plan(
    outstanding_balance: Decimal,
    overdue_days: int,
    action_text: Optional[ActionText] = None,
) -> List[CollectionAction]:
    """
    Escalation plan for a customer, most severe action first.

    Each tier is checked on its own, so a 35-day-old balance gets legal
    collection, repossession and a final notice. Contacting the customer is
    always the last step. The balance does not gate any tier yet.
    """
    text = action_text or DEFAULT_ACTION_TEXT
    plan = []

    for min_days, action, priority in ESCALATION_LADDER:
        if overdue_days >= min_days:
            plan.append(_action(action, priority, text))

    plan.append(_action(CollectionActionType.CONTACT_CUSTOMER, Priority.MEDIUM, text))
    return plan


def _action(action: CollectionActionType, priority: Priority, text: ActionText) -> CollectionAction:
    title, description = text.get(action, DEFAULT_ACTION_TEXT[action])
    return CollectionAction(action=action, title=title, description=description, priority=priority)


def overdue_days(
    oldest_overdue_date: Optional[date],
    as_of: Optional[date] = None,
    grace_days: int = DEFAULT_GRACE_DAYS,
) -> int:
    """Days past the payment grace period since the oldest overdue contract (0 if none)"""
    oldest = parse_date(oldest_overdue_date)
    if oldest is None:
        return 0
    today = parse_date(as_of or date.today())
    if today <= oldest:
        return 0
    return max(0, ceil_days(today - oldest) - grace_days)


def risk_level(amount: Decimal) -> RiskStatus:
    if amount >= HIGH_RISK_AMOUNT:
        return RiskStatus.HIGH_RISK
    elif amount >= CRITICAL_AMOUNT:
        return RiskStatus.MEDIUM_RISK
    else:
        return RiskStatus.LOW_RISK


def classify_risk(
    summary: CustomerArrearsSummary,
    threshold: Decimal = DEFAULT_ARREARS_THRESHOLD,
) -> RiskStatus:
    """Risk status for a customer; only customers in arrears are graded by amount"""
    if not is_at_risk(summary, threshold):
        return RiskStatus.GOOD_STANDING
    return risk_level(summary.outstanding_balance)


def summarize_arrears(
    summaries: Iterable[CustomerArrearsSummary],
    critical_amount: Decimal = CRITICAL_AMOUNT,
) -> ArrearsMetrics:
    """Totals over a list of customers in arrears (typically select_at_risk output)"""
    balances = [s.outstanding_balance or Decimal("0") for s in summaries]
    total = sum(balances, Decimal("0"))
    count = len(balances)

    return ArrearsMetrics(
        total_arrears=total,
        customers_count=count,
        average_amount=total / count if count else Decimal("0"),
        critical_cases=sum(1 for b in balances if b > critical_amount),
    )


def priority_distribution(
    summaries: Iterable[CustomerArrearsSummary],
    as_of: Optional[date] = None,
    grace_days: int = DEFAULT_GRACE_DAYS,
) -> Dict[str, int]:
    """Count customers per priority bucket by overdue days; each customer lands in one bucket"""
    counts = {"urgent": 0, "high": 0, "medium": 0, "low": 0}
    for summary in summaries:
        days = overdue_days(summary.oldest_overdue_date, as_of, grace_days)
        if days >= 30:
            counts["urgent"] += 1
        elif days >= 15:
            counts["high"] += 1
        elif days >= 7:
            counts["medium"] += 1
        else:
            counts["low"] += 1
    return counts
