"""837P Health Care Claim: Professional generator (005010X222A1)."""
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from x12gateway.config.payers import PayerConfig
from x12gateway.config.settings import InterchangeParties, get_settings
from x12gateway.models.domain import ClaimPayer, ProfessionalClaim, RenderingProvider, ServiceLine
from x12gateway.models.enums import Gender
from x12gateway.services.edi.envelope import (
    FUNCTIONAL_IDENTIFIERS,
    IMPLEMENTATION_GUIDES,
    build_interchange,
    build_transaction_set,
    clock_control_number,
)
from x12gateway.services.edi.generators.base import (
    normalize_diagnosis_code,
    provider_name_segment,
    resolve_parties,
    x12_date,
    x12_time,
)
from x12gateway.services.edi.grammar import COMPONENT_SEPARATOR, build_segment, clean_value
from x12gateway.services.edi.validator import validate_professional_claim
from x12gateway.utils.decimal_utils import FINANCIAL_PRECISION, format_amount, format_quantity, sum_amounts
from x12gateway.utils.errors import ValidationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

PRINCIPAL_DIAGNOSIS_QUALIFIER = "ABK"
OTHER_DIAGNOSIS_QUALIFIER = "ABF"
PROCEDURE_QUALIFIER = "HC"
MAX_MODIFIERS = 4


class Submitter(BaseModel):
    """Loop 1000A submitter and loop 1000B receiver identification."""

    model_config = ConfigDict(frozen=True)

    name: str
    identifier: str
    contact_name: str = "BILLING CONTACT"
    phone: str = ""
    receiver_name: str = "OFFICE ALLY"
    receiver_identifier: str = ""


def submitter_from_settings(claim: ProfessionalClaim, parties: InterchangeParties) -> Submitter:
    settings = get_settings()
    return Submitter(
        name=settings.submitter_name or claim.billing_provider.name,
        identifier=parties.sender_id,
        contact_name=settings.submitter_contact_name,
        phone=settings.submitter_phone or (claim.billing_provider.phone or ""),
        receiver_name=settings.claims_receiver_name,
        receiver_identifier=parties.receiver_id,
    )


def claim_payer_for(payer: PayerConfig) -> ClaimPayer:
    """
    ClaimPayer for an 837 addressed to a configured payer.

    Raises:
        ValidationError: the payer has no claims payer ID; the eligibility
            payer ID is never used in its place
    """
    if not payer.claims_payer_id:
        raise ValidationError(
            f"{payer.payer_display_name} has no claims payer ID configured",
            errors=["payer.claims_payer_id is required"],
        )
    return ClaimPayer(name=payer.payer_name, claims_payer_id=payer.claims_payer_id)


def line_total(line: ServiceLine) -> Decimal:
    return (line.charge * line.units).quantize(FINANCIAL_PRECISION, rounding=ROUND_HALF_UP)


def claim_total(claim: ProfessionalClaim) -> Decimal:
    """Total charge: sum of charge x units over every service line."""
    return sum_amounts(line_total(line) for line in claim.service_lines)


def resolve_claim_id(claim: ProfessionalClaim, control_number: str) -> str:
    """CLM01 patient control number; derived from the control number when not supplied."""
    return clean_value(claim.claim_id) if claim.claim_id else f"CLM{control_number}"


def _digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())


def _contact_segment(submitter: Submitter) -> str:
    phone = _digits(submitter.phone)
    if phone:
        return build_segment("PER", "IC", clean_value(submitter.contact_name), "TE", phone)
    return build_segment("PER", "IC", clean_value(submitter.contact_name))


def _rendering_segments(rendering: RenderingProvider) -> List[str]:
    segments = [
        build_segment(
            "NM1",
            "82",
            "1",
            clean_value(rendering.last_name),
            clean_value(rendering.first_name),
            "",
            "",
            "",
            "XX",
            rendering.npi,
        )
    ]
    if rendering.taxonomy_code:
        segments.append(build_segment("PRV", "PE", "PXC", rendering.taxonomy_code))
    return segments


def _service_line_segments(claim: ProfessionalClaim, line: ServiceLine, number: int) -> List[str]:
    procedure = COMPONENT_SEPARATOR.join(
        [PROCEDURE_QUALIFIER, clean_value(line.procedure_code)]
        + [clean_value(m) for m in line.modifiers[:MAX_MODIFIERS]]
    )
    place_of_service = line.place_of_service if line.place_of_service not in (None, claim.place_of_service) else ""
    pointers = COMPONENT_SEPARATOR.join(str(p) for p in line.diagnosis_pointers)
    service_date = line.service_date or claim.service_date

    segments = [
        build_segment("LX", str(number)),
        build_segment(
            "SV1",
            procedure,
            format_amount(line_total(line)),
            "UN",
            format_quantity(line.units),
            place_of_service,
            "",
            pointers,
        ),
        build_segment("DTP", "472", "D8", x12_date(service_date)),
    ]
    rendering = line.rendering_provider or claim.rendering_provider
    if rendering is not None:
        segments.extend(_rendering_segments(rendering))
    return segments


def build_837p_body(
    claim: ProfessionalClaim,
    claim_id: str,
    control_number: str,
    now: datetime,
    submitter: Submitter,
) -> List[str]:
    """Segments between ST and SE for a single professional claim."""
    provider = claim.billing_provider
    patient = claim.patient
    address = provider.address

    segments = [
        build_segment("BHT", "0019", "00", control_number, x12_date(now), x12_time(now), "CH"),
        build_segment("NM1", "41", "2", clean_value(submitter.name), "", "", "", "", "46", submitter.identifier),
        _contact_segment(submitter),
        build_segment(
            "NM1", "40", "2", clean_value(submitter.receiver_name), "", "", "", "", "46", submitter.receiver_identifier
        ),
        # 2000A billing provider
        build_segment("HL", "1", "", "20", "1"),
        build_segment("PRV", "BI", "PXC", provider.taxonomy_code),
        provider_name_segment("85", provider.name, provider.npi, provider.entity_type),
        build_segment("N3", clean_value(address.line1), clean_value(address.line2)),
        build_segment("N4", clean_value(address.city), clean_value(address.state), _digits(address.zip_code)),
        build_segment("REF", "EI", _digits(provider.tax_id)),
        # 2000B subscriber, who is also the patient
        build_segment("HL", "2", "1", "22", "0"),
        build_segment("SBR", "P", "18", "", "", "", "", "", "", claim.claim_filing_indicator),
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
    if patient.address is not None:
        segments.append(build_segment("N3", clean_value(patient.address.line1), clean_value(patient.address.line2)))
        segments.append(
            build_segment(
                "N4",
                clean_value(patient.address.city),
                clean_value(patient.address.state),
                _digits(patient.address.zip_code),
            )
        )
    gender = patient.gender.value if patient.gender is not None else Gender.UNKNOWN.value
    segments.append(build_segment("DMG", "D8", x12_date(patient.date_of_birth), gender))
    segments.append(
        build_segment("NM1", "PR", "2", clean_value(claim.payer.name), "", "", "", "", "PI", claim.payer.claims_payer_id)
    )

    # 2300 claim
    facility = COMPONENT_SEPARATOR.join([claim.place_of_service, "B", claim.frequency_code])
    segments.append(
        build_segment("CLM", claim_id, format_amount(claim_total(claim)), "", "", facility, "Y", "A", "Y", "Y")
    )
    if claim.prior_authorization:
        segments.append(build_segment("REF", "G1", clean_value(claim.prior_authorization)))

    diagnoses = []
    for index, code in enumerate(claim.diagnosis_codes):
        qualifier = PRINCIPAL_DIAGNOSIS_QUALIFIER if index == 0 else OTHER_DIAGNOSIS_QUALIFIER
        diagnoses.append(f"{qualifier}{COMPONENT_SEPARATOR}{normalize_diagnosis_code(code)}")
    segments.append(build_segment("HI", *diagnoses))

    # 2400 service lines
    for number, line in enumerate(claim.service_lines, start=1):
        segments.extend(_service_line_segments(claim, line, number))

    return segments


def generate_837p(
    claim: ProfessionalClaim,
    control_number: Optional[str] = None,
    now: Optional[datetime] = None,
    parties: Optional[InterchangeParties] = None,
    submitter: Optional[Submitter] = None,
) -> str:
    """
    Build a complete 837P interchange for one claim.

    Service dates are emitted per line (DTP*472 in loop 2400); the claim
    payer is addressed by its claims payer ID, never the eligibility ID.

    Raises:
        ValidationError: the claim is missing data the transaction needs
    """
    now = now or datetime.now()
    result = validate_professional_claim(claim, today=now.date())
    if not result.valid:
        logger.warning("Claim failed validation", error_count=len(result.errors))
        raise ValidationError("Professional claim is incomplete", errors=list(result.errors))

    control_number = control_number or clock_control_number()
    parties = resolve_parties(parties, for_claims=True)
    submitter = submitter or submitter_from_settings(claim, parties)
    claim_id = resolve_claim_id(claim, control_number)

    transaction = build_transaction_set("837", build_837p_body(claim, claim_id, control_number, now, submitter))
    x12 = build_interchange(
        sender_id=parties.sender_id,
        receiver_id=parties.receiver_id,
        control_number=control_number,
        usage_indicator=parties.usage_indicator,
        transaction_segments=transaction,
        functional_identifier=FUNCTIONAL_IDENTIFIERS["837"],
        version=IMPLEMENTATION_GUIDES["837"],
        sender_qualifier=parties.sender_qualifier,
        receiver_qualifier=parties.receiver_qualifier,
        now=now,
    )

    logger.info(
        "Generated 837P claim",
        payer_id=claim.payer.claims_payer_id,
        control_number=control_number,
        service_lines=len(claim.service_lines),
        segment_count=len(transaction),
    )
    return x12
