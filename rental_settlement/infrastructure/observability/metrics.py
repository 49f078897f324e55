"""Prometheus metrics for monitoring settlement charges, fiscal QR encoding and collections"""

from typing import List

from prometheus_client import Counter, Histogram, Gauge

from rental_settlement.domain.models import CollectionAction, SettlementResult

# Settlement metrics
settlement_counter = Counter(
    "rental_settlements_total",
    "Total contract settlements computed",
)

settlement_charge_counter = Counter(
    "rental_settlement_charges_total",
    "Settlements that incurred a charge, by charge type",
    ["charge_type"],  # late_fee | fuel | mileage | additional
)

settlement_total_histogram = Histogram(
    "rental_settlement_total_charges",
    "Total charges per settlement (currency units)",
    buckets=[0, 50, 100, 250, 500, 1000, 2500, 5000],
)

# Fiscal QR metrics
fiscal_qr_counter = Counter(
    "rental_fiscal_qr_total",
    "Fiscal QR payloads produced",
    ["outcome"],  # encoded | fallback
)

# Collections metrics
collection_action_counter = Counter(
    "rental_collection_actions_total",
    "Collection actions recommended",
    ["action"],
)

at_risk_customers_gauge = Gauge(
    "rental_at_risk_customers",
    "Customers above the arrears threshold in the latest review",
)


def record_settlement(result: SettlementResult) -> None:
    """Record which charges a settlement incurred and its total"""
    settlement_counter.inc()

    charges = {
        "late_fee": result.late_fee_amount,
        "fuel": result.fuel_charge_amount,
        "mileage": result.mileage_charge_amount,
        "additional": result.additional_charges,
    }
    for charge_type, amount in charges.items():
        if amount > 0:
            settlement_charge_counter.labels(charge_type=charge_type).inc()

    settlement_total_histogram.observe(float(result.total_charges))


def record_fiscal_qr(fallback: bool) -> None:
    fiscal_qr_counter.labels(outcome="fallback" if fallback else "encoded").inc()


def record_collection_plan(actions: List[CollectionAction]) -> None:
    for action in actions:
        collection_action_counter.labels(action=action.action.value).inc()
