"""Pre-flight validation of generator inputs."""
import re
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from x12gateway.models.domain import (
    ClaimInquiry,
    Patient,
    ProfessionalClaim,
    Provider,
    ValidationResult,
)
from x12gateway.utils.errors import ValidationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

NPI_PATTERN = re.compile(r"^\d{10}$")
TAX_ID_PATTERN = re.compile(r"^\d{9}$")
MEMBER_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
ZIP_PATTERN = re.compile(r"^\d{5}(\d{4})?$")
MAX_PATIENT_AGE_YEARS = 120
MAX_DIAGNOSIS_CODES = 12
MAX_POINTERS_PER_LINE = 4

ModelT = TypeVar("ModelT", bound=BaseModel)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def age_in_years(date_of_birth: date, today: date) -> int:
    """Whole years completed, counting a birthday only once it has passed."""
    before_birthday = (today.month, today.day) < (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - int(before_birthday)


def coerce_model(model_cls: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """
    Accept a model instance or a plain mapping.

    Raises:
        ValidationError: the mapping does not fit the model
    """
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ValidationError(f"Invalid {model_cls.__name__} input", errors=errors)


def patient_errors(patient: Optional[Patient], today: Optional[date] = None, prefix: str = "patient") -> List[str]:
    """Problems with a patient's demographics, as human-readable messages."""
    if patient is None:
        return [f"{prefix} is required"]

    today = today or date.today()
    errors = []
    if _blank(patient.first_name):
        errors.append(f"{prefix}.first_name is required")
    if _blank(patient.last_name):
        errors.append(f"{prefix}.last_name is required")
    if patient.date_of_birth is None:
        errors.append(f"{prefix}.date_of_birth is required")
    else:
        if patient.date_of_birth > today:
            errors.append(f"{prefix}.date_of_birth cannot be in the future")
        elif age_in_years(patient.date_of_birth, today) > MAX_PATIENT_AGE_YEARS:
            errors.append(f"{prefix}.date_of_birth is more than {MAX_PATIENT_AGE_YEARS} years ago")
    if patient.member_id is not None and patient.member_id.strip():
        if not MEMBER_ID_PATTERN.match(patient.member_id.strip()):
            errors.append(f"{prefix}.member_id must contain only letters and digits")
    return errors


def validate_patient(patient: Optional[Patient], today: Optional[date] = None) -> ValidationResult:
    errors = patient_errors(patient, today)
    return ValidationResult(valid=not errors, errors=tuple(errors))


def require_valid_patient(patient: Optional[Patient], today: Optional[date] = None) -> Patient:
    """Raise ValidationError unless the patient can appear in a transaction."""
    errors = patient_errors(patient, today)
    if errors:
        logger.warning("Patient failed validation", error_count=len(errors))
        raise ValidationError("Patient information is incomplete or invalid", errors=errors)
    return patient


def provider_errors(provider: Optional[Provider], for_claims: bool = False, prefix: str = "provider") -> List[str]:
    if provider is None:
        return [f"{prefix} is required"]
    errors = []
    if _blank(provider.name):
        errors.append(f"{prefix}.name is required")
    if _blank(provider.npi):
        errors.append(f"{prefix}.npi is required")
    elif not NPI_PATTERN.match(provider.npi.strip()):
        errors.append(f"{prefix}.npi must be 10 digits")

    if for_claims:
        if _blank(provider.tax_id):
            errors.append(f"{prefix}.tax_id is required")
        elif not TAX_ID_PATTERN.match(provider.tax_id.replace("-", "").strip()):
            errors.append(f"{prefix}.tax_id must be 9 digits")
        if _blank(provider.taxonomy_code):
            errors.append(f"{prefix}.taxonomy_code is required")
        if provider.address is None:
            errors.append(f"{prefix}.address is required")
        else:
            if _blank(provider.address.line1):
                errors.append(f"{prefix}.address.line1 is required")
            if _blank(provider.address.city) or _blank(provider.address.state):
                errors.append(f"{prefix}.address city and state are required")
            if not ZIP_PATTERN.match(provider.address.zip_code.replace("-", "")):
                errors.append(f"{prefix}.address.zip_code must be 5 or 9 digits")
    return errors


def validate_claim_inquiry(
    inquiry: Union[ClaimInquiry, Mapping[str, Any]], today: Optional[date] = None
) -> ValidationResult:
    """
    Enumerate missing fields of a 276 inquiry without raising.

    Required fields produce errors; the recommended service date and
    claim amount only produce advisories.
    """
    try:
        inquiry = coerce_model(ClaimInquiry, inquiry)
    except ValidationError as e:
        return ValidationResult(valid=False, errors=tuple(e.errors))

    errors = []
    for field in ("payer_id", "payer_name", "provider_npi", "provider_name", "claim_control_number"):
        if _blank(getattr(inquiry, field)):
            errors.append(f"{field} is required")
    if not _blank(inquiry.provider_npi) and not NPI_PATTERN.match(inquiry.provider_npi.strip()):
        errors.append("provider_npi must be 10 digits")

    errors.extend(patient_errors(inquiry.patient, today))
    if inquiry.patient is not None and _blank(inquiry.patient.member_id):
        errors.append("patient.member_id is required")
    if inquiry.dependent is not None:
        errors.extend(patient_errors(inquiry.dependent, today, prefix="dependent"))

    advisories = []
    if inquiry.service_date is None:
        advisories.append("service_date is recommended")
    if inquiry.claim_amount is None:
        advisories.append("claim_amount is recommended")
    elif inquiry.claim_amount < 0:
        errors.append("claim_amount cannot be negative")

    return ValidationResult(valid=not errors, errors=tuple(errors), advisories=tuple(advisories))


def validate_professional_claim(claim: ProfessionalClaim, today: Optional[date] = None) -> ValidationResult:
    """Check an 837P claim for every field the generator needs."""
    errors = patient_errors(claim.patient, today)
    if _blank(claim.patient.member_id):
        errors.append("patient.member_id is required")
    errors.extend(provider_errors(claim.billing_provider, for_claims=True, prefix="billing_provider"))

    if _blank(claim.payer.name):
        errors.append("payer.name is required")
    if _blank(claim.payer.claims_payer_id):
        errors.append("payer.claims_payer_id is required")

    diagnosis_count = len(claim.diagnosis_codes)
    if diagnosis_count == 0:
        errors.append("at least one diagnosis code is required")
    elif diagnosis_count > MAX_DIAGNOSIS_CODES:
        errors.append(f"at most {MAX_DIAGNOSIS_CODES} diagnosis codes are allowed")
    for code in claim.diagnosis_codes:
        if _blank(code):
            errors.append("diagnosis codes cannot be blank")

    if not claim.service_lines:
        errors.append("at least one service line is required")
    for number, line in enumerate(claim.service_lines, start=1):
        label = f"service_lines[{number}]"
        if _blank(line.procedure_code):
            errors.append(f"{label}.procedure_code is required")
        if line.charge is None or line.charge <= Decimal("0"):
            errors.append(f"{label}.charge must be greater than zero")
        if line.units is None or line.units <= Decimal("0"):
            errors.append(f"{label}.units must be greater than zero")
        if not line.diagnosis_pointers:
            errors.append(f"{label}.diagnosis_pointers requires at least one pointer")
        elif len(line.diagnosis_pointers) > MAX_POINTERS_PER_LINE:
            errors.append(f"{label}.diagnosis_pointers allows at most {MAX_POINTERS_PER_LINE} pointers")
        for pointer in line.diagnosis_pointers:
            if pointer < 1 or pointer > diagnosis_count:
                errors.append(f"{label}.diagnosis_pointers references missing diagnosis {pointer}")
        if line.service_date is None and claim.service_date is None:
            errors.append(f"{label}.service_date is required")

    return ValidationResult(valid=not errors, errors=tuple(errors))
