"""Fiscal QR payload for tax invoices - TLV records, base64-encoded

Each field becomes [tag:1 byte][length:1 byte][value:length bytes], tags 1-5 in
the fixed order below. The whole stream is base64-encoded for the QR renderer.
"""

import base64
import json
import logging
from dataclasses import fields as dataclass_fields, is_dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Tuple, Union

from rental_settlement.domain.exceptions import FieldTooLongError, InvalidInvoiceFieldError
from rental_settlement.domain.models import FiscalInvoiceFields

logger = logging.getLogger(__name__)

TLV_FIELDS = (
    (1, "seller_name"),
    (2, "vat_number"),
    (3, "timestamp"),
    (4, "total_with_vat"),
    (5, "vat_amount"),
)
MAX_FIELD_BYTES = 255
DEFAULT_VAT_RATE = Decimal("0.15")
CENTS = Decimal("0.01")


def encode_tlv(fields: Union[FiscalInvoiceFields, Mapping[str, Any]]) -> bytes:
    """
    Build the raw TLV byte stream for the five invoice fields.

    Accepts the dataclass or a mapping keyed by field name. Missing fields
    encode as empty values. Nothing is truncated.

    Raises:
        InvalidInvoiceFieldError: fields is neither mapping nor invoice fields, or a field is not text
        FieldTooLongError: a field's UTF-8 form exceeds 255 bytes
    """
    if isinstance(fields, Mapping):
        values = fields
    elif isinstance(fields, FiscalInvoiceFields):
        values = {name: getattr(fields, name) for _, name in TLV_FIELDS}
    else:
        raise InvalidInvoiceFieldError(
            f"Invoice fields must be FiscalInvoiceFields or a mapping, got {type(fields).__name__}"
        )

    stream = bytearray()
    for tag, name in TLV_FIELDS:
        value = values.get(name)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise InvalidInvoiceFieldError(f"Field '{name}' must be text, got {type(value).__name__}")

        raw = value.encode("utf-8")
        if len(raw) > MAX_FIELD_BYTES:
            raise FieldTooLongError(name, len(raw))

        stream.append(tag)
        stream.append(len(raw))
        stream.extend(raw)

    return bytes(stream)


def _snapshot(fields: Any) -> bytes:
    if is_dataclass(fields) and not isinstance(fields, type):
        data: Dict[str, Any] = {f.name: getattr(fields, f.name) for f in dataclass_fields(fields)}
    elif isinstance(fields, Mapping):
        data = {str(key): value for key, value in fields.items()}
    else:
        data = {"value": fields}

    try:
        return json.dumps(data, ensure_ascii=False, default=str).encode("utf-8")
    except (TypeError, ValueError):
        # Cycles and unencodable text fall back to the repr
        return json.dumps({"value": repr(fields)}).encode("utf-8")


def encode_fiscal_qr(fields: Union[FiscalInvoiceFields, Mapping[str, Any]]) -> Tuple[str, bool]:
    """
    Encode invoice fields and report whether the raw-snapshot fallback was used.

    Returns: (payload, fallback_used)
    """
    try:
        return base64.b64encode(encode_tlv(fields)).decode("ascii"), False
    except Exception as e:
        logger.warning(
            f"Fiscal QR TLV encoding failed, using raw snapshot: {e}",
            extra={"step": "fiscal_qr_fallback", "error_type": type(e).__name__},
        )
        return base64.b64encode(_snapshot(fields)).decode("ascii"), True


def generate_fiscal_qr(fields: Union[FiscalInvoiceFields, Mapping[str, Any]]) -> str:
    """
    Encode invoice fields as the base64 TLV payload embedded in the invoice QR.

    Never raises: if the TLV stream cannot be built, the raw fields are
    serialised to JSON and base64-encoded instead, and a warning is logged.
    """
    payload, _ = encode_fiscal_qr(fields)
    return payload


def build_invoice_fields(
    seller_name: str,
    vat_number: str,
    base_amount: Decimal,
    vat_included: bool,
    issued_at: datetime,
    vat_rate: Decimal = DEFAULT_VAT_RATE,
) -> FiscalInvoiceFields:
    """
    Derive the QR fields for an invoice from its pre-tax amount.

    VAT applies only when the contract is VAT-registered; amounts are
    formatted with two decimals, half-up.

    Example:
        base 100, VAT included at 15% → total "115.00", vat "15.00"
    """
    base = Decimal(str(base_amount or 0))
    vat = base * Decimal(str(vat_rate)) if vat_included else Decimal("0")
    total = base + vat

    return FiscalInvoiceFields(
        seller_name=seller_name or "",
        vat_number=vat_number or "",
        timestamp=issued_at.isoformat(),
        total_with_vat=str(total.quantize(CENTS, rounding=ROUND_HALF_UP)),
        vat_amount=str(vat.quantize(CENTS, rounding=ROUND_HALF_UP)),
    )
