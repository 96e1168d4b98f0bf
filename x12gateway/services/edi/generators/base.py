"""Formatting helpers shared by the transaction generators."""
import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

from x12gateway.config.settings import InterchangeParties, get_settings
from x12gateway.models.enums import EntityType
from x12gateway.services.edi.grammar import build_segment, clean_value

# Provider names that identify an organization rather than a person.
ORGANIZATION_NAME_PATTERN = re.compile(
    r"\b(PLLC|LLC|PC|INC|CORP|ASSOCIATES|GROUP|CENTER|CLINIC)\b", re.IGNORECASE
)


def detect_provider_entity_type(name: str) -> EntityType:
    """
    Guess whether a provider name belongs to an organization or a person.

    Keyword heuristic; callers that know the answer should set
    Provider.entity_type instead.
    """
    normalized = (name or "").replace("_", " ")
    if ORGANIZATION_NAME_PATTERN.search(normalized):
        return EntityType.ORGANIZATION
    return EntityType.PERSON


def split_person_name(name: str) -> Tuple[str, str]:
    """(last, first) from "FIRST [MIDDLE] LAST"; underscores count as spaces."""
    parts = (name or "").replace("_", " ").split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return clean_value(parts[0]), ""
    return clean_value(parts[-1]), clean_value(parts[0])


def provider_name_segment(
    entity_code: str,
    name: str,
    npi: str,
    entity_type: Optional[EntityType] = None,
) -> str:
    """NM1 for a provider identified by NPI (qualifier XX)."""
    entity_type = entity_type or detect_provider_entity_type(name)
    if entity_type == EntityType.ORGANIZATION:
        return build_segment("NM1", entity_code, "2", clean_value(name.replace("_", " ")), "", "", "", "", "XX", npi)
    last, first = split_person_name(name)
    return build_segment("NM1", entity_code, "1", last, first, "", "", "", "XX", npi)


def x12_date(value: Union[date, datetime, str]) -> str:
    """CCYYMMDD from a date or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        value = date.fromisoformat(value.strip()[:10])
    return value.strftime("%Y%m%d")


def x12_time(value: datetime) -> str:
    return value.strftime("%H%M")


def normalize_diagnosis_code(code: str) -> str:
    """ICD-10 codes travel without the decimal point."""
    return code.replace(".", "").strip().upper()


def resolve_parties(parties: Optional[InterchangeParties], for_claims: bool = False) -> InterchangeParties:
    return parties or get_settings().interchange_parties(for_claims=for_claims)
