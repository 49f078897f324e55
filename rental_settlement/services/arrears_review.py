"""Arrears review - pick customers at risk and decide their collection plans"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from rental_settlement.config import Settings, settings
from rental_settlement.domain.arrears import (
    ActionText,
    build_collection_plan,
    classify_risk,
    overdue_days,
    priority_distribution,
    select_at_risk,
    summarize_arrears,
)
from rental_settlement.domain.exceptions import InvalidProviderDataError
from rental_settlement.domain.models import ArrearsMetrics, CollectionAction, CustomerArrearsSummary
from rental_settlement.infrastructure.observability.logging import log_collection_plan
from rental_settlement.infrastructure.observability.metrics import (
    at_risk_customers_gauge,
    record_collection_plan,
)
from rental_settlement.schemas import ArrearsSummaryRecord

ArrearsRow = Union[CustomerArrearsSummary, Mapping[str, Any]]


@dataclass
class CustomerCollectionReview:
    """At-risk customer with the plan decided for them"""

    summary: CustomerArrearsSummary
    overdue_days: int
    actions: List[CollectionAction]


def parse_arrears_rows(rows: Iterable[ArrearsRow]) -> List[CustomerArrearsSummary]:
    """
    Convert aggregation provider rows into CustomerArrearsSummary objects.

    Raises:
        InvalidProviderDataError: a row is missing its id or has bad values
    """
    summaries = []
    for row in rows:
        if isinstance(row, CustomerArrearsSummary):
            summaries.append(row)
            continue
        try:
            summaries.append(ArrearsSummaryRecord.model_validate(row).to_summary())
        except ValidationError as e:
            raise InvalidProviderDataError(f"Invalid arrears summary row: {e}") from e
    return summaries


def review_arrears(
    rows: Iterable[ArrearsRow],
    threshold: Optional[Decimal] = None,
    as_of: Optional[date] = None,
    action_text: Optional[ActionText] = None,
    config: Settings = settings,
) -> List[CustomerCollectionReview]:
    """
    Select customers above the arrears threshold and build a plan for each.

    Reviews come back largest balance first. Input rows are not modified;
    each review carries a copy of the summary with its risk status set.
    """
    if threshold is None:
        threshold = config.arrears_threshold

    at_risk = select_at_risk(parse_arrears_rows(rows), threshold)
    at_risk_customers_gauge.set(len(at_risk))

    reviews = []
    for summary in at_risk:
        graded = replace(summary, risk_status=classify_risk(summary, threshold))
        days = overdue_days(graded.oldest_overdue_date, as_of, config.overdue_grace_days)
        actions = build_collection_plan(graded.outstanding_balance, days, action_text)

        record_collection_plan(actions)
        log_collection_plan(graded.customer_id, graded.outstanding_balance, days, actions)
        reviews.append(CustomerCollectionReview(summary=graded, overdue_days=days, actions=actions))

    return reviews


def arrears_overview(
    rows: Iterable[ArrearsRow],
    threshold: Optional[Decimal] = None,
    as_of: Optional[date] = None,
    config: Settings = settings,
) -> Tuple[ArrearsMetrics, Dict[str, int]]:
    """Dashboard totals and priority buckets for customers above the threshold"""
    if threshold is None:
        threshold = config.arrears_threshold

    at_risk = select_at_risk(parse_arrears_rows(rows), threshold)
    metrics = summarize_arrears(at_risk, config.critical_arrears_amount)
    distribution = priority_distribution(at_risk, as_of, config.overdue_grace_days)
    return metrics, distribution
