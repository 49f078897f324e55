"""Integration tests for close-out and arrears review services"""

import base64
import pytest
from datetime import date, datetime
from decimal import Decimal
from prometheus_client import REGISTRY
from rental_settlement.config import Settings
from rental_settlement.domain.exceptions import InvalidProviderDataError
from rental_settlement.domain.models import CollectionActionType, ContractReturnFacts, FiscalInvoiceFields, RiskStatus
from rental_settlement.services.arrears_review import arrears_overview, parse_arrears_rows, review_arrears
from rental_settlement.services.closeout import issue_invoice_qr, issue_tax_invoice_qr, settle_return

AS_OF = date(2024, 3, 1)


def sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_settle_return_from_provider_row(return_row):
    """Test a raw provider row settles like the typed facts"""
    before = sample("rental_settlements_total")
    late_before = sample("rental_settlement_charges_total", {"charge_type": "late_fee"})

    result = settle_return("contract_1", return_row)

    assert result.total_charges == 600
    assert result.deposit_refund == 400
    assert sample("rental_settlements_total") == before + 1
    assert sample("rental_settlement_charges_total", {"charge_type": "late_fee"}) == late_before + 1


def test_settle_return_uses_configured_prices(return_facts: ContractReturnFacts):
    """Test settings drive fuel and mileage prices"""
    config = Settings(fuel_price_per_quarter=Decimal("30"), excess_km_price=Decimal("1"))

    result = settle_return("contract_2", return_facts, config=config)

    assert result.fuel_charge_amount == 60
    assert result.mileage_charge_amount == 200


def test_settle_return_rejects_malformed_row():
    """Test structurally invalid provider rows raise InvalidProviderDataError"""
    with pytest.raises(InvalidProviderDataError):
        settle_return("contract_3", {"daily_rate": "abc"})


def test_issue_tax_invoice_qr():
    """Test closing invoice QR carries VAT computed with the configured rate"""
    payload = issue_tax_invoice_qr(
        "inv_1",
        seller_name="Rentals Co",
        vat_number="300000000000003",
        base_amount=Decimal("1000"),
        vat_included=True,
        issued_at=datetime(2024, 1, 12, 10, 0),
    )

    raw = base64.b64decode(payload)
    assert raw.startswith(b"\x01\x0aRentals Co\x02\x0f300000000000003")
    assert raw.endswith(b"\x04\x071150.00\x05\x06150.00")


def test_issue_invoice_qr_counts_fallbacks():
    """Test the fallback path is visible in metrics"""
    before = sample("rental_fiscal_qr_total", {"outcome": "fallback"})

    payload = issue_invoice_qr("inv_2", FiscalInvoiceFields("x" * 256, "", "", "", ""))

    assert payload
    assert sample("rental_fiscal_qr_total", {"outcome": "fallback"}) == before + 1


def test_issue_invoice_qr_from_provider_row():
    """Test invoice fields can come straight from a provider row"""
    before = sample("rental_fiscal_qr_total", {"outcome": "encoded"})

    payload = issue_invoice_qr("inv_3", {"seller_name": "A", "vat_number": 1, "timestamp": "t"})

    assert base64.b64decode(payload) == b"\x01\x01A\x02\x011\x03\x01t\x04\x00\x05\x00"
    assert sample("rental_fiscal_qr_total", {"outcome": "encoded"}) == before + 1


def test_review_arrears(arrears_rows):
    """Test at-risk customers come back largest first with graded status and plans"""
    reviews = review_arrears(arrears_rows, as_of=AS_OF)

    assert [r.summary.customer_id for r in reviews] == ["cust_large", "cust_mid", "cust_small"]
    assert [r.summary.risk_status for r in reviews] == [
        RiskStatus.HIGH_RISK,
        RiskStatus.MEDIUM_RISK,
        RiskStatus.LOW_RISK,
    ]
    assert [r.overdue_days for r in reviews] == [46, 15, 0]
    assert reviews[0].actions[0].action == CollectionActionType.LEGAL_COLLECTION
    assert [a.action for a in reviews[1].actions] == [
        CollectionActionType.VEHICLE_REPOSSESSION,
        CollectionActionType.FINAL_NOTICE,
        CollectionActionType.CONTACT_CUSTOMER,
    ]
    assert [a.action for a in reviews[2].actions] == [CollectionActionType.CONTACT_CUSTOMER]
    assert sample("rental_at_risk_customers") == 3


def test_review_arrears_does_not_mutate_summaries(arrears_rows):
    """Test supplied summaries keep their original risk status"""
    summaries = parse_arrears_rows(arrears_rows)

    reviews = review_arrears(summaries, as_of=AS_OF)

    assert all(s.risk_status is None for s in summaries)
    assert all(r.summary.risk_status is not None for r in reviews)


def test_review_arrears_threshold_override(arrears_rows):
    """Test an explicit threshold narrows the selection"""
    reviews = review_arrears(arrears_rows, threshold=Decimal("5000"), as_of=AS_OF)

    assert [r.summary.customer_id for r in reviews] == ["cust_large", "cust_mid"]


def test_review_arrears_rejects_row_without_id():
    """Test malformed aggregation rows raise InvalidProviderDataError"""
    with pytest.raises(InvalidProviderDataError):
        review_arrears([{"total_contracted": "9000", "overdue_contracts": 1}])


def test_arrears_overview(arrears_rows):
    """Test dashboard totals and buckets over at-risk customers"""
    metrics, distribution = arrears_overview(arrears_rows, as_of=AS_OF)

    assert metrics.total_arrears == Decimal("21000")  # 13000 + 6000 + 2000
    assert metrics.customers_count == 3
    assert metrics.critical_cases == 2
    assert distribution == {"urgent": 1, "high": 1, "medium": 0, "low": 1}
