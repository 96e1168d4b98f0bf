"""276 Health Care Claim Status Request generator (005010X212)."""
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Union

from x12gateway.config.settings import InterchangeParties
from x12gateway.models.domain import ClaimInquiry, Patient
from x12gateway.services.edi.envelope import (
    FUNCTIONAL_IDENTIFIERS,
    IMPLEMENTATION_GUIDES,
    build_interchange,
    build_transaction_set,
    clock_control_number,
)
from x12gateway.services.edi.generators.base import (
    provider_name_segment,
    resolve_parties,
    x12_date,
    x12_time,
)
from x12gateway.services.edi.grammar import build_segment, clean_value
from x12gateway.services.edi.validator import coerce_model, validate_claim_inquiry
from x12gateway.utils.decimal_utils import format_amount
from x12gateway.utils.errors import ValidationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)


def _demographics(person: Patient) -> str:
    gender = person.gender.value if person.gender is not None else ""
    return build_segment("DMG", "D8", x12_date(person.date_of_birth), gender)


def _claim_segments(inquiry: ClaimInquiry) -> List[str]:
    """Claim status tracking loop: trace, references, amount, service date."""
    segments = [build_segment("TRN", "1", inquiry.claim_control_number, inquiry.provider_npi)]
    if inquiry.payer_claim_number:
        segments.append(build_segment("REF", "1K", clean_value(inquiry.payer_claim_number)))
    if inquiry.patient_account_number:
        segments.append(build_segment("REF", "EJ", clean_value(inquiry.patient_account_number)))
    segments.append(build_segment("REF", "D9", inquiry.claim_control_number))
    if inquiry.claim_amount is not None:
        segments.append(build_segment("AMT", "T3", format_amount(inquiry.claim_amount)))
    if inquiry.service_date is not None:
        segments.append(build_segment("DTP", "472", "D8", x12_date(inquiry.service_date)))
    return segments


def build_276_body(inquiry: ClaimInquiry, control_number: str, now: datetime) -> List[str]:
    """
    Segments between ST and SE for one claim inquiry.

    The subscriber level always announces a possible child level
    (HL04 = 1); a dependent level follows only when the inquiry names one.
    """
    patient = inquiry.patient
    segments = [
        build_segment("BHT", "0010", "13", control_number, x12_date(now), x12_time(now)),
        build_segment("HL", "1", "", "20", "1"),
        build_segment("NM1", "PR", "2", clean_value(inquiry.payer_name), "", "", "", "", "PI", inquiry.payer_id),
        build_segment("HL", "2", "1", "21", "1"),
        provider_name_segment("1P", inquiry.provider_name, inquiry.provider_npi, inquiry.provider_entity_type),
        build_segment("HL", "3", "2", "22", "1"),
        _demographics(patient),
        build_segment(
            "NM1",
            "IL",
            "1",
            clean_value(patient.last_name),
            clean_value(patient.first_name),
            clean_value(patient.middle_name),
            "",
            "",
            "MI",
            patient.member_id.strip(),
        ),
    ]

    if inquiry.dependent is None:
        segments.extend(_claim_segments(inquiry))
        return segments

    dependent = inquiry.dependent
    segments.extend(
        [
            build_segment("HL", "4", "3", "23", "0"),
            _demographics(dependent),
            build_segment(
                "NM1",
                "QC",
                "1",
                clean_value(dependent.last_name),
                clean_value(dependent.first_name),
                clean_value(dependent.middle_name),
            ),
        ]
    )
    segments.extend(_claim_segments(inquiry))
    return segments


def _checked_inquiry(inquiry: Union[ClaimInquiry, Mapping[str, Any]], now: datetime) -> ClaimInquiry:
    result = validate_claim_inquiry(inquiry, today=now.date())
    if not result.valid:
        raise ValidationError("Claim status inquiry is incomplete", errors=list(result.errors))
    for advisory in result.advisories:
        logger.debug("Claim status inquiry advisory", advisory=advisory)
    return coerce_model(ClaimInquiry, inquiry)


def _wrap(transaction_segments: List[str], control_number: str, now: datetime, parties: InterchangeParties) -> str:
    return build_interchange(
        sender_id=parties.sender_id,
        receiver_id=parties.receiver_id,
        control_number=control_number,
        usage_indicator=parties.usage_indicator,
        transaction_segments=transaction_segments,
        functional_identifier=FUNCTIONAL_IDENTIFIERS["276"],
        version=IMPLEMENTATION_GUIDES["276"],
        sender_qualifier=parties.sender_qualifier,
        receiver_qualifier=parties.receiver_qualifier,
        now=now,
    )


def generate_276(
    inquiry: Union[ClaimInquiry, Mapping[str, Any]],
    control_number: Optional[str] = None,
    now: Optional[datetime] = None,
    parties: Optional[InterchangeParties] = None,
) -> str:
    """
    Build a complete 276 interchange for one claim.

    The TRN trace carries the claim control number from the original 837
    submission; that number is what the payer uses to find the claim.

    Raises:
        ValidationError: a required field is missing
    """
    now = now or datetime.now()
    inquiry = _checked_inquiry(inquiry, now)
    control_number = control_number or clock_control_number()
    parties = resolve_parties(parties)

    transaction = build_transaction_set("276", build_276_body(inquiry, control_number, now))
    logger.info(
        "Generated 276 claim status inquiry",
        payer_id=inquiry.payer_id,
        control_number=control_number,
        segment_count=len(transaction),
    )
    return _wrap(transaction, control_number, now, parties)


def generate_276_batch(
    inquiries: Sequence[Union[ClaimInquiry, Mapping[str, Any]]],
    control_number: Optional[str] = None,
    now: Optional[datetime] = None,
    parties: Optional[InterchangeParties] = None,
) -> str:
    """
    Build one interchange holding a 276 transaction set per inquiry.

    Every inquiry is validated before any segment is built.
    """
    if not inquiries:
        raise ValidationError("Batch claim status inquiry needs at least one claim", errors=["no inquiries"])

    now = now or datetime.now()
    checked = []
    errors = []
    for index, inquiry in enumerate(inquiries, start=1):
        try:
            checked.append(_checked_inquiry(inquiry, now))
        except ValidationError as e:
            errors.extend(f"inquiry[{index}]: {message}" for message in e.errors)
    if errors:
        raise ValidationError("One or more claim status inquiries are incomplete", errors=errors)

    control_number = control_number or clock_control_number()
    parties = resolve_parties(parties)

    transaction_segments: List[str] = []
    for index, inquiry in enumerate(checked, start=1):
        set_control = str(index).zfill(4)
        body = build_276_body(inquiry, f"{control_number}{set_control}", now)
        transaction_segments.extend(build_transaction_set("276", body, control_number=set_control))

    logger.info(
        "Generated 276 claim status batch",
        control_number=control_number,
        transaction_sets=len(checked),
    )
    return _wrap(transaction_segments, control_number, now, parties)
