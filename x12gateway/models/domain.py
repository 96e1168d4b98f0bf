"""Request-side domain objects handed to the transaction generators."""
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from x12gateway.models.enums import EntityType, Gender


class FrozenModel(BaseModel):
    """Immutable value object."""

    model_config = ConfigDict(frozen=True)


class Address(FrozenModel):
    line1: str
    line2: Optional[str] = None
    city: str
    state: str
    zip_code: str


class Patient(FrozenModel):
    """Subscriber or dependent as known to the practice."""

    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    member_id: Optional[str] = None
    group_number: Optional[str] = None
    address: Optional[Address] = None


class Provider(FrozenModel):
    """
    Billing or inquiring provider.

    entity_type overrides the organization-name heuristic when the caller
    knows whether the NPI belongs to a person or an organization.
    """

    name: str
    npi: str
    tax_id: Optional[str] = None
    taxonomy_code: Optional[str] = None
    address: Optional[Address] = None
    phone: Optional[str] = None
    entity_type: Optional[EntityType] = None


class RenderingProvider(FrozenModel):
    first_name: str
    last_name: str
    npi: str
    taxonomy_code: Optional[str] = None


class ClaimPayer(FrozenModel):
    """Payer as addressed on an 837; claims_payer_id is not the eligibility payer ID."""

    name: str
    claims_payer_id: str


class ServiceLine(FrozenModel):
    procedure_code: str
    charge: Decimal
    units: Decimal = Decimal("1")
    diagnosis_pointers: Tuple[int, ...] = (1,)
    modifiers: Tuple[str, ...] = ()
    service_date: Optional[date] = None
    place_of_service: Optional[str] = None
    rendering_provider: Optional[RenderingProvider] = None


class ProfessionalClaim(FrozenModel):
    """Everything needed to build one 837P claim."""

    patient: Patient
    billing_provider: Provider
    payer: ClaimPayer
    diagnosis_codes: Tuple[str, ...]
    service_lines: Tuple[ServiceLine, ...]
    claim_id: Optional[str] = None
    service_date: Optional[date] = None
    place_of_service: str = "11"
    frequency_code: str = "1"
    claim_filing_indicator: str = "MC"
    rendering_provider: Optional[RenderingProvider] = None
    prior_authorization: Optional[str] = None


class ClaimInquiry(FrozenModel):
    """
    Input to a 276 claim status inquiry.

    Fields are optional at construction so that validate_claim_inquiry can
    report every missing one at once; generation refuses incomplete inquiries.
    """

    payer_id: Optional[str] = None
    payer_name: Optional[str] = None
    provider_npi: Optional[str] = None
    provider_name: Optional[str] = None
    provider_entity_type: Optional[EntityType] = None
    claim_control_number: Optional[str] = None
    patient: Optional[Patient] = None
    dependent: Optional[Patient] = None
    service_date: Optional[date] = None
    claim_amount: Optional[Decimal] = None
    payer_claim_number: Optional[str] = None
    patient_account_number: Optional[str] = None


class ValidationResult(FrozenModel):
    valid: bool
    errors: Tuple[str, ...] = Field(default_factory=tuple)
    advisories: Tuple[str, ...] = Field(default_factory=tuple)
