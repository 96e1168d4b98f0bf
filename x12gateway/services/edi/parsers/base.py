"""Helpers shared by the response parsers."""
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from x12gateway.models.results import (
    AmountValue,
    Contact,
    DateValue,
    EntityName,
    OtherPayer,
    ReferenceValue,
    RejectReason,
)
from x12gateway.services.edi.code_tables import (
    AAA_FOLLOW_UP_ACTIONS,
    AAA_REJECT_CODES,
    AMOUNT_QUALIFIERS,
    COMMUNICATION_QUALIFIERS,
    DATE_QUALIFIERS,
    ENTITY_IDENTIFIER_CODES,
    REFERENCE_QUALIFIERS,
    describe,
)
from x12gateway.services.edi.envelope import verify_envelope
from x12gateway.services.edi.grammar import Segment, element, parse_segments, segment_text
from x12gateway.utils.decimal_utils import parse_financial_amount
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

DATE_FORMATS = {8: "%Y%m%d", 6: "%y%m%d"}


def load_segments(raw: str) -> List[Segment]:
    """Split a response and verify whatever envelope it carries."""
    segments = parse_segments(raw)
    verify_envelope(segments)
    return segments


def parse_x12_date(value: str) -> Optional[date]:
    """CCYYMMDD (or YYMMDD) to a date; None when absent or unparseable."""
    value = (value or "").strip()
    fmt = DATE_FORMATS.get(len(value))
    if fmt and value.isdigit():
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            pass
    if value:
        logger.debug("Unparseable X12 date", length=len(value))
    return None


def date_value(qualifier: str, date_format: str, value: str) -> DateValue:
    """DTP/DTM value, with D8 and RD8 resolved to start/end dates."""
    start = end = None
    if date_format == "RD8" and "-" in value:
        first, _, last = value.partition("-")
        start, end = parse_x12_date(first), parse_x12_date(last)
    elif date_format in ("D8", "") and value:
        start = end = parse_x12_date(value)
    return DateValue(
        qualifier=qualifier,
        description=describe(DATE_QUALIFIERS, qualifier),
        format=date_format,
        value=value,
        start=start,
        end=end,
    )


def dtp_value(seg: Segment) -> DateValue:
    return date_value(element(seg, 1), element(seg, 2), element(seg, 3))


def dtm_value(seg: Segment) -> DateValue:
    return date_value(element(seg, 1), "D8", element(seg, 2))


def reference_value(seg: Segment) -> ReferenceValue:
    qualifier = element(seg, 1)
    return ReferenceValue(
        qualifier=qualifier,
        description=describe(REFERENCE_QUALIFIERS, qualifier),
        value=element(seg, 2),
    )


def amount_value(seg: Segment) -> AmountValue:
    qualifier = element(seg, 1)
    return AmountValue(
        qualifier=qualifier,
        description=describe(AMOUNT_QUALIFIERS, qualifier),
        amount=parse_financial_amount(element(seg, 2)),
    )


def entity_name(seg: Segment) -> EntityName:
    """NM1 with entity code, type, name parts and identifier."""
    code = element(seg, 1)
    return EntityName(
        entity_code=code,
        entity_description=describe(ENTITY_IDENTIFIER_CODES, code),
        entity_type=element(seg, 2) or None,
        last_name=element(seg, 3) or None,
        first_name=element(seg, 4) or None,
        middle_name=element(seg, 5) or None,
        id_qualifier=element(seg, 8) or None,
        identifier=element(seg, 9) or None,
    )


def reject_reason(seg: Segment) -> RejectReason:
    """AAA segment: validity flag, reject reason and follow-up action."""
    code = element(seg, 3)
    action = element(seg, 4)
    return RejectReason(
        valid=element(seg, 1),
        code=code,
        description=describe(AAA_REJECT_CODES, code) if code else "",
        follow_up_action=action,
        follow_up_description=describe(AAA_FOLLOW_UP_ACTIONS, action) if action else "",
        raw=segment_text(seg),
    )


def transaction_control_number(segments: Sequence[Segment]) -> Optional[str]:
    for seg in segments:
        if seg[0] == "ST":
            return element(seg, 2) or None
    return None


def describe_noting(table: Mapping[str, str], code: str, warnings: List[str], label: str) -> str:
    """describe(), recording a warning when the code is not in the table."""
    description = describe(table, code)
    if code and code not in table:
        warning = f"Unknown {label} code: {code}"
        if warning not in warnings:
            warnings.append(warning)
    return description


def amount_noting(value: str, warnings: List[str], label: str) -> Optional[Decimal]:
    """Monetary element, recording a warning when a present value cannot be read."""
    amount = parse_financial_amount(value)
    value = (value or "").strip()
    if amount is None and value:
        warnings.append(f"Unreadable {label} amount: {value}")
    return amount


def related_entity(nm1: Segment) -> Dict:
    """Mutable accumulator for an NM1 inside an LS/LE loop."""
    code = element(nm1, 1)
    name = entity_name(nm1)
    return {
        "entity_code": code,
        "entity_description": describe(ENTITY_IDENTIFIER_CODES, code),
        "name": name.display_name,
        "id_qualifier": name.id_qualifier,
        "payer_id": name.identifier,
        "contacts": [],
        "references": [],
    }


def contacts_from_per(per: Segment) -> List[Contact]:
    """PER03-PER08 as up to three (qualifier, value) pairs."""
    contacts = []
    for index in (3, 5, 7):
        qualifier = element(per, index)
        value = element(per, index + 1)
        if qualifier and value:
            contacts.append(
                Contact(type=qualifier, label=describe(COMMUNICATION_QUALIFIERS, qualifier), value=value)
            )
    return contacts


def apply_location(target: Dict, seg: Segment) -> None:
    """N3/N4 into an address dict."""
    if seg[0] == "N3":
        target["address"] = " ".join(part for part in (element(seg, 1), element(seg, 2)) if part)
    else:
        target["city"] = element(seg, 1) or None
        target["state"] = element(seg, 2) or None
        target["zip_code"] = element(seg, 3) or None


def freeze_entity(entity: Dict) -> OtherPayer:
    return OtherPayer(
        **{
            **entity,
            "contacts": tuple(entity["contacts"]),
            "references": tuple(entity["references"]),
        }
    )
