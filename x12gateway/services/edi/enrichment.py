"""
Plan classification heuristics layered over a parsed 271.

These rules match free-text plan descriptions and payer names the way Utah
Medicaid and a few commercial payers happen to word them. They are a
presentation aid, not part of the 271 wire contract, and new payers should
not be assumed to follow the same strings.
"""
from typing import Iterable, List, Optional

from x12gateway.config.payers import PayerConfig
from x12gateway.models.enums import PayerCategory, PlanType
from x12gateway.models.results import EligibilityResponse, OtherPayer, PlanClassification
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

TARGETED_ADULT = "TARGETED ADULT MEDICAID"
TRADITIONAL_MARKERS = ("TRADITIONAL ADULT", "FEE FOR SERVICE")
MENTAL_HEALTH = "MENTAL HEALTH"
MANAGED_CARE_MARKER = "MC INTEGRATED"
HMO_INSURANCE_TYPE = "HM"

# Utah Medicaid managed care organizations by the payer ID used in 2120 loops
MANAGED_CARE_ORGANIZATIONS = {
    "2000000": "SelectHealth",
    "2000001": "Molina Healthcare",
    "2000002": "Health Choice Utah",
}

MANAGED_CARE_NAME_MARKERS = (
    ("HEALTH CHOICE", "Health Choice Utah"),
    ("MOLINA", "Molina Healthcare"),
    ("SELECTHEALTH", "SelectHealth"),
    ("SELECT HEALTH", "SelectHealth"),
)

COMMERCIAL_INSURANCE_TYPES = {
    "HM": PlanType.HMO,
    "PR": PlanType.PPO,
    "PS": PlanType.POS,
    "EP": PlanType.EPO,
}

MEDICAID_CATEGORIES = frozenset({PayerCategory.MEDICAID, PayerCategory.MEDICAID_MANAGED_CARE})


def _managed_care_name(entity: OtherPayer) -> Optional[str]:
    if entity.payer_id and entity.payer_id in MANAGED_CARE_ORGANIZATIONS:
        return MANAGED_CARE_ORGANIZATIONS[entity.payer_id]
    name = (entity.name or "").upper()
    for marker, organization in MANAGED_CARE_NAME_MARKERS:
        if marker in name:
            return organization
    return None


def _related_entities(response: EligibilityResponse) -> Iterable[OtherPayer]:
    for benefit in response.benefits:
        yield from benefit.related_entities
    yield from response.coordination_of_benefits.other_payers


def _matching(descriptions: List[str], markers) -> List[str]:
    return [text for text in descriptions if any(marker in text for marker in markers)]


def _classify_medicaid(response: EligibilityResponse, descriptions: List[str]) -> PlanClassification:
    organizations: List[str] = []
    for entity in _related_entities(response):
        organization = _managed_care_name(entity)
        if organization and organization not in organizations:
            organizations.append(organization)

    managed_plan = any(b.insurance_type_code == HMO_INSURANCE_TYPE for b in response.benefits) or bool(
        _matching(descriptions, (MANAGED_CARE_MARKER,))
    )
    targeted = _matching(descriptions, (TARGETED_ADULT,))
    traditional = _matching(descriptions, TRADITIONAL_MARKERS)
    is_managed_care = bool(organizations) or managed_plan

    notes = []
    if _matching(descriptions, (MENTAL_HEALTH,)):
        notes.append("Mental health services are carved out of the medical plan")

    if is_managed_care:
        plan_type = PlanType.MANAGED_CARE
        program = organizations[0] if organizations else "Medicaid Managed Care"
    elif targeted:
        plan_type = PlanType.TARGETED_ADULT_FFS
        program = "Targeted Adult Medicaid"
    elif traditional:
        plan_type = PlanType.TRADITIONAL_FFS
        program = "Medicaid Fee-for-Service"
    else:
        plan_type = PlanType.UNKNOWN
        program = "Medicaid"

    warning = None
    if is_managed_care:
        enrolled_in = organizations[0] if organizations else "a managed care plan"
        warning = f"Patient is enrolled in {enrolled_in}. Verify network status before scheduling."

    return PlanClassification(
        plan_type=plan_type,
        program=program,
        is_managed_care=is_managed_care,
        managed_care_organizations=tuple(organizations),
        requires_network_check=is_managed_care,
        ambiguous=is_managed_care and bool(targeted or traditional),
        matched_descriptions=tuple(dict.fromkeys(targeted + traditional)),
        notes=tuple(notes),
        warning=warning,
    )


def _classify_commercial(response: EligibilityResponse, descriptions: List[str]) -> PlanClassification:
    found: List[PlanType] = []
    for benefit in response.benefits:
        plan_type = COMMERCIAL_INSURANCE_TYPES.get(benefit.insurance_type_code)
        if plan_type and plan_type not in found:
            found.append(plan_type)
    for plan_type in COMMERCIAL_INSURANCE_TYPES.values():
        if plan_type not in found and _matching(descriptions, (plan_type.value,)):
            found.append(plan_type)

    if not found:
        return PlanClassification(plan_type=PlanType.UNKNOWN, program="Commercial")
    return PlanClassification(
        plan_type=found[0],
        program="Commercial",
        ambiguous=len(found) > 1,
        matched_descriptions=tuple(plan_type.value for plan_type in found),
    )


def classify_plan(response: EligibilityResponse, payer: Optional[PayerConfig] = None) -> PlanClassification:
    """
    Best-effort plan type for an eligibility response.

    Medicaid payers get the fee-for-service / managed care reading; every
    other payer is read for HMO/PPO/POS/EPO.
    """
    descriptions = [b.plan_description.upper() for b in response.benefits if b.plan_description]
    if payer is not None:
        medicaid = payer.category in MEDICAID_CATEGORIES
    else:
        medicaid = any("MEDICAID" in text for text in descriptions)

    if medicaid:
        classification = _classify_medicaid(response, descriptions)
    else:
        classification = _classify_commercial(response, descriptions)

    logger.debug(
        "Classified plan",
        payer_id=payer.payer_id if payer else None,
        plan_type=classification.plan_type.value,
        ambiguous=classification.ambiguous,
    )
    return classification
