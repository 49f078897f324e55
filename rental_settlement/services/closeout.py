"""Contract close-out - settlement charges and the fiscal QR for the closing invoice"""

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from rental_settlement.config import Settings, settings
from rental_settlement.domain.exceptions import InvalidProviderDataError
from rental_settlement.domain.fiscal import build_invoice_fields, encode_fiscal_qr
from rental_settlement.domain.models import ContractReturnFacts, FiscalInvoiceFields, SettlementResult
from rental_settlement.domain.settlement import calculate_settlement
from rental_settlement.infrastructure.observability.logging import log_settlement
from rental_settlement.infrastructure.observability.metrics import record_fiscal_qr, record_settlement
from rental_settlement.schemas import ContractReturnRecord, InvoiceFieldsRecord


def parse_return_record(row: Mapping[str, Any]) -> ContractReturnFacts:
    """
    Convert a contract/return provider row into ContractReturnFacts.

    Raises:
        InvalidProviderDataError: row has values of the wrong type
    """
    try:
        return ContractReturnRecord.model_validate(row).to_facts()
    except ValidationError as e:
        raise InvalidProviderDataError(f"Invalid contract return record: {e}") from e


def settle_return(
    contract_id: str,
    record: Union[ContractReturnFacts, Mapping[str, Any]],
    config: Settings = settings,
) -> SettlementResult:
    """
    Compute the settlement for a returned vehicle.

    Flow:
    1. Parse the provider row (if not already ContractReturnFacts)
    2. Calculate charges with configured fuel and mileage prices
    3. Record metrics and log the outcome for the audit trail
    """
    start_time = time.time()

    facts = record if isinstance(record, ContractReturnFacts) else parse_return_record(record)
    result = calculate_settlement(
        facts,
        price_per_quarter=config.fuel_price_per_quarter,
        price_per_excess_km=config.excess_km_price,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_settlement(result)
    log_settlement(contract_id, result, duration_ms)

    return result


def issue_invoice_qr(
    invoice_id: str,
    fields: Union[FiscalInvoiceFields, Mapping[str, Any]],
) -> str:
    """Fiscal QR payload for invoice fields supplied directly or as a provider row"""
    if not isinstance(fields, FiscalInvoiceFields):
        try:
            fields = InvoiceFieldsRecord.model_validate(fields).to_fields()
        except ValidationError as e:
            raise InvalidProviderDataError(f"Invalid invoice fields: {e}") from e

    payload, fallback = encode_fiscal_qr(fields)
    record_fiscal_qr(fallback)
    logging.info(
        "Fiscal QR issued",
        extra={"invoice_id": invoice_id, "step": "fiscal_qr", "fallback": fallback},
    )
    return payload


def issue_tax_invoice_qr(
    invoice_id: str,
    seller_name: str,
    vat_number: str,
    base_amount: Decimal,
    vat_included: bool,
    issued_at: Optional[datetime] = None,
    config: Settings = settings,
) -> str:
    """Build the QR fields for a closing invoice from its pre-tax amount and encode them"""
    fields = build_invoice_fields(
        seller_name=seller_name,
        vat_number=vat_number,
        base_amount=base_amount,
        vat_included=vat_included,
        issued_at=issued_at or datetime.now(),
        vat_rate=config.vat_rate,
    )
    return issue_invoice_qr(invoice_id, fields)
