"""
Per-payer X12 configuration.

Payers reject structurally valid 270s for different optional-field reasons:
Medicaid rejects extraneous identifiers while commercial payers reject a
missing gender. Field presence is therefore driven by this table rather than
by payer-specific branches in the generators. Entries are frozen and the
directory is read-only once built.
"""
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from x12gateway.models.domain import Patient, ValidationResult
from x12gateway.models.enums import DtpFormat, FieldRequirement, PayerCategory
from x12gateway.utils.errors import ConfigurationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

# Patient fields a payer can ask for
PATIENT_FIELDS = (
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "member_id",
    "group_number",
    "address",
)


class PayerConfig(BaseModel):
    """X12 dialect settings for one payer."""

    model_config = ConfigDict(frozen=True)

    key: str
    payer_id: str
    payer_name: str
    payer_display_name: str
    category: PayerCategory
    claims_payer_id: Optional[str] = None
    requires_gender_in_dmg: bool = False
    supports_member_id_in_nm1: bool = True
    dtp_format: DtpFormat = DtpFormat.D8
    allows_name_only: bool = False
    required_fields: Tuple[str, ...] = ("first_name", "last_name", "date_of_birth")
    recommended_fields: Tuple[str, ...] = ()
    optional_fields: Tuple[str, ...] = ()
    notes: str = ""

    def requirement_for(self, field: str) -> FieldRequirement:
        if field in self.required_fields:
            return FieldRequirement.REQUIRED
        if field in self.recommended_fields:
            return FieldRequirement.RECOMMENDED
        if field in self.optional_fields:
            return FieldRequirement.OPTIONAL
        return FieldRequirement.NOT_NEEDED

    def accepts(self, field: str) -> bool:
        """True when the payer wants the field on the wire at all."""
        return self.requirement_for(field) != FieldRequirement.NOT_NEEDED


DEFAULT_PAYERS: Tuple[PayerConfig, ...] = (
    PayerConfig(
        key="UTAH_MEDICAID",
        payer_id="UTMCD",
        payer_name="UTAH MEDICAID",
        payer_display_name="Utah Medicaid (Traditional FFS)",
        category=PayerCategory.MEDICAID,
        claims_payer_id="U4005",
        requires_gender_in_dmg=False,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.RD8,
        allows_name_only=True,
        recommended_fields=("member_id",),
        optional_fields=("gender",),
        notes="Name and DOB are sufficient; SSN is never sent.",
    ),
    PayerConfig(
        key="AETNA",
        payer_id="60054",
        payer_name="AETNA",
        payer_display_name="Aetna Healthcare",
        category=PayerCategory.COMMERCIAL,
        claims_payer_id="60054",
        requires_gender_in_dmg=True,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.D8,
        required_fields=("first_name", "last_name", "date_of_birth", "gender"),
        recommended_fields=("member_id",),
        optional_fields=("group_number",),
        notes="Requires gender and works best with member ID.",
    ),
    PayerConfig(
        key="AETNA_BETTER_HEALTH_IL",
        payer_id="ABH12",
        payer_name="AETNA BETTER HEALTH",
        payer_display_name="Aetna Better Health - Illinois",
        category=PayerCategory.MEDICAID_MANAGED_CARE,
        requires_gender_in_dmg=True,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.D8,
        required_fields=("first_name", "last_name", "date_of_birth", "gender", "member_id"),
        notes="Medicaid managed care plan. Requires Medicaid ID and gender.",
    ),
    PayerConfig(
        key="REGENCE_BCBS",
        payer_id="REGENCE",
        payer_name="REGENCE BLUECROSS BLUESHIELD",
        payer_display_name="Regence BCBS Utah",
        category=PayerCategory.COMMERCIAL,
        requires_gender_in_dmg=True,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.D8,
        required_fields=("first_name", "last_name", "date_of_birth", "gender", "member_id"),
        recommended_fields=("group_number",),
    ),
    PayerConfig(
        key="SELECTHEALTH",
        payer_id="SELH",
        payer_name="SELECTHEALTH",
        payer_display_name="SelectHealth Utah",
        category=PayerCategory.COMMERCIAL,
        requires_gender_in_dmg=True,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.D8,
        required_fields=("first_name", "last_name", "date_of_birth", "gender", "member_id"),
        recommended_fields=("group_number",),
    ),
    PayerConfig(
        key="MOLINA_UTAH",
        payer_id="MOLINA",
        payer_name="MOLINA HEALTHCARE",
        payer_display_name="Molina Healthcare Utah",
        category=PayerCategory.MEDICAID_MANAGED_CARE,
        requires_gender_in_dmg=True,
        supports_member_id_in_nm1=True,
        dtp_format=DtpFormat.D8,
        required_fields=("first_name", "last_name", "date_of_birth", "gender", "member_id"),
    ),
)


class PayerDirectory:
    """Read-only lookup of payer configurations by payer ID or key."""

    def __init__(self, payers: Iterable[PayerConfig] = DEFAULT_PAYERS):
        by_id: Dict[str, PayerConfig] = {}
        by_key: Dict[str, PayerConfig] = {}
        for payer in payers:
            if payer.payer_id in by_id:
                raise ConfigurationError(f"Duplicate payer ID in directory: {payer.payer_id}")
            by_id[payer.payer_id] = payer
            by_key[payer.key] = payer
        self._by_id: Mapping[str, PayerConfig] = MappingProxyType(by_id)
        self._by_key: Mapping[str, PayerConfig] = MappingProxyType(by_key)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "PayerDirectory":
        """Build a directory from plain records (e.g. loaded from JSON)."""
        return cls(PayerConfig.model_validate(record) for record in records)

    def get(self, payer_id: str) -> PayerConfig:
        """
        Look up a payer by payer ID, falling back to its key.

        Raises:
            ConfigurationError: the payer is not configured
        """
        payer = self._by_id.get(payer_id) or self._by_key.get(payer_id)
        if payer is None:
            logger.error("Payer not configured", payer_id=payer_id)
            raise ConfigurationError(
                f"No X12 configuration for payer '{payer_id}'",
                details={"payer_id": payer_id},
            )
        return payer

    def __contains__(self, payer_id: str) -> bool:
        return payer_id in self._by_id or payer_id in self._by_key

    def __iter__(self):
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def by_category(self, category: PayerCategory) -> List[PayerConfig]:
        return [payer for payer in self._by_id.values() if payer.category == category]


def _field_present(patient: Patient, field: str) -> bool:
    value = getattr(patient, field, None)
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def check_patient_fields(patient: Patient, payer: PayerConfig) -> ValidationResult:
    """
    Compare a patient against a payer's field requirements.

    Missing required fields are errors, missing recommended fields are advisories.
    """
    errors = []
    advisories = []
    for field in PATIENT_FIELDS:
        if _field_present(patient, field):
            continue
        requirement = payer.requirement_for(field)
        if requirement == FieldRequirement.REQUIRED:
            errors.append(f"{field} is required by {payer.payer_display_name}")
        elif requirement == FieldRequirement.RECOMMENDED:
            advisories.append(f"{field} is recommended by {payer.payer_display_name}")
    if not payer.allows_name_only and not _field_present(patient, "member_id") and "member_id" not in payer.required_fields:
        advisories.append(f"{payer.payer_display_name} does not support name-only searches; member_id improves matching")
    return ValidationResult(valid=not errors, errors=tuple(errors), advisories=tuple(advisories))
