"""270 Eligibility, Coverage or Benefit Inquiry generator (005010X279A1)."""
from datetime import datetime
from typing import List, Optional

from x12gateway.config.payers import PayerConfig, check_patient_fields
from x12gateway.config.settings import InterchangeParties
from x12gateway.models.domain import Patient, Provider
from x12gateway.models.enums import DtpFormat, Gender
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
from x12gateway.services.edi.validator import provider_errors, require_valid_patient
from x12gateway.utils.errors import ValidationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

HEALTH_BENEFIT_PLAN_COVERAGE = "30"
TRACE_ASSIGNER_NOTE = "ELIGIBILITY"


def _dmg_gender(patient: Patient, payer: PayerConfig) -> str:
    """Gender element for DMG03, or "" when the payer does not want it."""
    if not payer.requires_gender_in_dmg:
        return ""
    if patient.gender in (Gender.MALE, Gender.FEMALE):
        return patient.gender.value
    raise ValidationError(
        f"{payer.payer_display_name} requires patient gender (M or F)",
        errors=["gender is required"],
    )


def build_270_body(
    patient: Patient,
    payer: PayerConfig,
    provider: Provider,
    control_number: str,
    now: datetime,
    service_type_code: str = HEALTH_BENEFIT_PLAN_COVERAGE,
) -> List[str]:
    """Segments between ST and SE for one subscriber inquiry."""
    today = x12_date(now)
    gender = _dmg_gender(patient, payer)

    segments = [
        build_segment("BHT", "0022", "13", control_number, today, x12_time(now)),
        build_segment("HL", "1", "", "20", "1"),
        build_segment("NM1", "PR", "2", clean_value(payer.payer_name), "", "", "", "", "PI", payer.payer_id),
        build_segment("HL", "2", "1", "21", "1"),
        provider_name_segment("1P", provider.name, provider.npi, provider.entity_type),
        build_segment("HL", "3", "2", "22", "0"),
        build_segment("TRN", "1", control_number, provider.npi, TRACE_ASSIGNER_NOTE),
    ]

    member_id = (patient.member_id or "").strip()
    if member_id and payer.supports_member_id_in_nm1:
        segments.append(
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
                member_id,
            )
        )
    else:
        if member_id:
            logger.debug("Member ID omitted for payer", payer_id=payer.payer_id)
        segments.append(
            build_segment(
                "NM1",
                "IL",
                "1",
                clean_value(patient.last_name),
                clean_value(patient.first_name),
                clean_value(patient.middle_name),
            )
        )

    group_number = (patient.group_number or "").strip()
    if group_number and payer.accepts("group_number"):
        segments.append(build_segment("REF", "6P", clean_value(group_number)))

    segments.append(build_segment("DMG", "D8", x12_date(patient.date_of_birth), gender))

    if payer.dtp_format == DtpFormat.RD8:
        segments.append(build_segment("DTP", "291", "RD8", f"{today}-{today}"))
    else:
        segments.append(build_segment("DTP", "291", "D8", today))

    segments.append(build_segment("EQ", service_type_code))
    return segments


def generate_270(
    patient: Patient,
    payer: PayerConfig,
    provider: Provider,
    control_number: Optional[str] = None,
    now: Optional[datetime] = None,
    parties: Optional[InterchangeParties] = None,
) -> str:
    """
    Build a complete 270 interchange for one subscriber.

    Args:
        patient: subscriber demographics
        payer: payer configuration that decides which optional fields appear
        provider: information receiver (name and NPI)
        control_number: 9-digit interchange control number; clock-derived when omitted
        now: timestamp for the envelope and plan date; local wall clock when omitted
        parties: envelope sender/receiver; taken from settings when omitted

    Raises:
        ValidationError: required input is missing; no partial transaction is produced
    """
    now = now or datetime.now()
    require_valid_patient(patient, today=now.date())

    field_check = check_patient_fields(patient, payer)
    errors = list(field_check.errors) + provider_errors(provider)
    if errors:
        raise ValidationError("Eligibility inquiry input is incomplete", errors=errors)

    control_number = control_number or clock_control_number()
    parties = resolve_parties(parties)

    body = build_270_body(patient, payer, provider, control_number, now)
    transaction = build_transaction_set("270", body)
    x12 = build_interchange(
        sender_id=parties.sender_id,
        receiver_id=parties.receiver_id,
        control_number=control_number,
        usage_indicator=parties.usage_indicator,
        transaction_segments=transaction,
        functional_identifier=FUNCTIONAL_IDENTIFIERS["270"],
        version=IMPLEMENTATION_GUIDES["270"],
        sender_qualifier=parties.sender_qualifier,
        receiver_qualifier=parties.receiver_qualifier,
        now=now,
    )

    logger.info(
        "Generated 270 eligibility inquiry",
        payer_id=payer.payer_id,
        control_number=control_number,
        segment_count=len(transaction),
        advisories=len(field_check.advisories),
    )
    return x12
