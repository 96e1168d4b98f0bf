"""
Typed results produced by the response parsers and the orchestrator.

All result objects are frozen: a parser builds each record once, when the
segment that closes it is reached, and nothing mutates it afterwards.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import Field

from x12gateway.models.domain import FrozenModel
from x12gateway.models.enums import (
    AcknowledgmentKind,
    ClaimStatusOutcome,
    PlanType,
    ResponseType,
    ResultErrorCode,
)


# ---------------------------------------------------------------------------
# Shared annotations
# ---------------------------------------------------------------------------


class EntityName(FrozenModel):
    """An NM1 party: payer, provider, subscriber, patient."""

    entity_code: str
    entity_description: str = ""
    entity_type: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    id_qualifier: Optional[str] = None
    identifier: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.entity_type == "2" or not self.first_name:
            return self.last_name or ""
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)


class DateValue(FrozenModel):
    qualifier: str
    description: str = ""
    format: str = ""
    value: str = ""
    start: Optional[date] = None
    end: Optional[date] = None


class ReferenceValue(FrozenModel):
    qualifier: str
    description: str = ""
    value: str = ""


class AmountValue(FrozenModel):
    qualifier: str
    description: str = ""
    amount: Optional[Decimal] = None


class RejectReason(FrozenModel):
    """An AAA request validation segment."""

    valid: str = ""
    code: str = ""
    description: str = ""
    follow_up_action: str = ""
    follow_up_description: str = ""
    raw: str = ""


class Contact(FrozenModel):
    type: str
    label: str
    value: str


class OtherPayer(FrozenModel):
    """A party named inside an LS*2120 / LE*2120 loop."""

    entity_code: str = ""
    entity_description: str = ""
    name: str = ""
    id_qualifier: Optional[str] = None
    payer_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    contacts: Tuple[Contact, ...] = ()
    references: Tuple[ReferenceValue, ...] = ()


# ---------------------------------------------------------------------------
# 271
# ---------------------------------------------------------------------------


class EligibilityBenefit(FrozenModel):
    """One EB segment together with its subordinate MSG/DTP/REF/2120 data."""

    eligibility_code: str
    eligibility_description: str = ""
    coverage_level: str = ""
    coverage_level_description: str = ""
    service_type_codes: Tuple[str, ...] = ()
    service_type_descriptions: Tuple[str, ...] = ()
    insurance_type_code: str = ""
    insurance_type_description: str = ""
    plan_description: str = ""
    time_period_qualifier: str = ""
    time_period_description: str = ""
    monetary_amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    quantity_qualifier: str = ""
    quantity: Optional[Decimal] = None
    authorization_required: str = ""
    in_plan_network: str = ""
    messages: Tuple[str, ...] = ()
    dates: Tuple[DateValue, ...] = ()
    references: Tuple[ReferenceValue, ...] = ()
    related_entities: Tuple[OtherPayer, ...] = ()
    raw: str = ""


class BenefitAmount(FrozenModel):
    service_type_code: str
    service_type_description: str = ""
    amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    coverage_level: str = ""
    time_period: str = ""
    in_plan_network: str = ""
    plan_description: str = ""


class BenefitSummary(FrozenModel):
    """Benefit facts keyed by service type code."""

    copays: Dict[str, Tuple[BenefitAmount, ...]] = Field(default_factory=dict)
    deductibles: Dict[str, Tuple[BenefitAmount, ...]] = Field(default_factory=dict)
    out_of_pocket: Dict[str, Tuple[BenefitAmount, ...]] = Field(default_factory=dict)
    coinsurance: Dict[str, Tuple[BenefitAmount, ...]] = Field(default_factory=dict)

    @property
    def has_copay(self) -> bool:
        return bool(self.copays)

    def copay_for(self, service_type_code: str) -> Optional[Decimal]:
        entries = self.copays.get(service_type_code, ())
        return entries[0].amount if entries else None


class SubscriberInfo(FrozenModel):
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    id_qualifier: Optional[str] = None
    member_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    references: Tuple[ReferenceValue, ...] = ()
    dates: Tuple[DateValue, ...] = ()

    def reference(self, qualifier: str) -> Optional[str]:
        for ref in self.references:
            if ref.qualifier == qualifier:
                return ref.value
        return None


class CoordinationOfBenefits(FrozenModel):
    """Other-insurance facts gathered from 2120 loops and EB*R."""

    has_other_insurance: bool = False
    other_payers: Tuple[OtherPayer, ...] = ()
    rejections: Tuple[RejectReason, ...] = ()
    member_last_name: Optional[str] = None
    member_first_name: Optional[str] = None
    member_id: Optional[str] = None
    references: Tuple[ReferenceValue, ...] = ()
    warnings: Tuple[str, ...] = ()


class EligibilityResponse(FrozenModel):
    enrolled: bool
    benefits: Tuple[EligibilityBenefit, ...] = ()
    messages: Tuple[str, ...] = ()
    payer: Optional[EntityName] = None
    information_receiver: Optional[EntityName] = None
    patient: Optional[SubscriberInfo] = None
    rejections: Tuple[RejectReason, ...] = ()
    error: Optional[str] = None
    transaction_control_number: Optional[str] = None
    trace_numbers: Tuple[str, ...] = ()
    summary: BenefitSummary = Field(default_factory=BenefitSummary)
    coordination_of_benefits: CoordinationOfBenefits = Field(default_factory=CoordinationOfBenefits)
    warnings: Tuple[str, ...] = ()

    @property
    def active_plan_descriptions(self) -> List[str]:
        """Every distinct EB*1 plan description, in response order."""
        seen: List[str] = []
        for benefit in self.benefits:
            if benefit.eligibility_code == "1" and benefit.plan_description:
                if benefit.plan_description not in seen:
                    seen.append(benefit.plan_description)
        return seen

    @property
    def has_active_coverage(self) -> bool:
        return any(b.eligibility_code in ("1", "2", "3", "4", "5") for b in self.benefits)


class PlanClassification(FrozenModel):
    """Heuristic reading of plan descriptions; not part of the wire contract."""

    plan_type: PlanType = PlanType.UNKNOWN
    program: str = ""
    is_managed_care: bool = False
    managed_care_organizations: Tuple[str, ...] = ()
    requires_network_check: bool = False
    ambiguous: bool = False
    matched_descriptions: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()
    warning: Optional[str] = None


# ---------------------------------------------------------------------------
# 277
# ---------------------------------------------------------------------------


class HierarchicalLevel(FrozenModel):
    id: str
    parent_id: str = ""
    level_code: str = ""
    has_children: bool = False


class ClaimStatusEntry(FrozenModel):
    category_code: str
    category_description: str = ""
    status_code: str = ""
    status_description: str = ""
    entity_code: str = ""
    entity_description: str = ""
    effective_date: Optional[date] = None
    amount: Optional[Decimal] = None
    payment_amount: Optional[Decimal] = None
    is_additional: bool = False
    raw: str = ""


class ClaimStatusRecord(FrozenModel):
    trace_number: Optional[str] = None
    trace_originator: Optional[str] = None
    referenced_trace_numbers: Tuple[str, ...] = ()
    hl_id: Optional[str] = None
    patient: Optional[EntityName] = None
    statuses: Tuple[ClaimStatusEntry, ...] = ()
    references: Tuple[ReferenceValue, ...] = ()
    dates: Tuple[DateValue, ...] = ()
    amounts: Tuple[AmountValue, ...] = ()
    claim_control_number: Optional[str] = None
    payer_claim_control_number: Optional[str] = None
    service_date: Optional[date] = None
    claim_amount: Optional[Decimal] = None

    @property
    def primary_status(self) -> Optional[ClaimStatusEntry]:
        for status in self.statuses:
            if not status.is_additional:
                return status
        return None


class ClaimStatusSummary(FrozenModel):
    overall_status: ClaimStatusOutcome = ClaimStatusOutcome.UNKNOWN
    counts_by_category: Dict[str, int] = Field(default_factory=dict)
    total_claims: int = 0
    message: str = ""


class ClaimStatusResponse(FrozenModel):
    claims: Tuple[ClaimStatusRecord, ...] = ()
    payer: Optional[EntityName] = None
    provider: Optional[EntityName] = None
    information_receiver: Optional[EntityName] = None
    levels: Tuple[HierarchicalLevel, ...] = ()
    summary: ClaimStatusSummary = Field(default_factory=ClaimStatusSummary)
    transaction_control_number: Optional[str] = None
    reference_identification: Optional[str] = None
    transaction_date: Optional[date] = None
    warnings: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# 835
# ---------------------------------------------------------------------------


class AdjustmentDetail(FrozenModel):
    reason_code: str
    reason_description: str = ""
    amount: Optional[Decimal] = None
    quantity: Optional[Decimal] = None


class AdjustmentGroup(FrozenModel):
    group_code: str
    group_description: str = ""
    adjustments: Tuple[AdjustmentDetail, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((a.amount for a in self.adjustments if a.amount is not None), Decimal("0"))


class RemittanceServiceLine(FrozenModel):
    line_number: Optional[str] = None
    procedure_qualifier: str = ""
    procedure_code: str = ""
    modifiers: Tuple[str, ...] = ()
    charge_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    units: Optional[Decimal] = None
    service_date: Optional[date] = None
    line_control_number: Optional[str] = None
    allowed_amount: Optional[Decimal] = None
    adjustments: Tuple[AdjustmentGroup, ...] = ()


class RemittanceClaim(FrozenModel):
    claim_id: str
    status_code: str = ""
    status_description: str = ""
    charge_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    patient_responsibility: Optional[Decimal] = None
    filing_indicator: str = ""
    payer_claim_control_number: str = ""
    facility_code: str = ""
    frequency_code: str = ""
    patient: Optional[EntityName] = None
    rendering_provider: Optional[EntityName] = None
    dates: Tuple[DateValue, ...] = ()
    amounts: Tuple[AmountValue, ...] = ()
    adjustments: Tuple[AdjustmentGroup, ...] = ()
    service_lines: Tuple[RemittanceServiceLine, ...] = ()

    def adjustment_total(self) -> Decimal:
        """Claim-level plus line-level adjustment amounts."""
        total = sum((group.total for group in self.adjustments), Decimal("0"))
        for line in self.service_lines:
            total += sum((group.total for group in line.adjustments), Decimal("0"))
        return total


class PaymentInfo(FrozenModel):
    handling_code: str = ""
    amount: Optional[Decimal] = None
    credit_debit: str = ""
    method: str = ""
    method_description: str = ""
    format: str = ""
    check_number: Optional[str] = None
    originating_company_id: Optional[str] = None
    effective_date: Optional[date] = None
    production_date: Optional[date] = None


class RemittanceAdvice(FrozenModel):
    payment: PaymentInfo = Field(default_factory=PaymentInfo)
    payer: Optional[EntityName] = None
    payee: Optional[EntityName] = None
    claims: Tuple[RemittanceClaim, ...] = ()
    transaction_control_number: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    @property
    def total_paid(self) -> Decimal:
        return sum((c.paid_amount for c in self.claims if c.paid_amount is not None), Decimal("0"))


# ---------------------------------------------------------------------------
# 999
# ---------------------------------------------------------------------------


class AcknowledgmentEntry(FrozenModel):
    """One diagnostic segment from a 999 (or legacy 997) acknowledgment."""

    kind: AcknowledgmentKind
    segment_id: str
    raw: str
    transaction_set_id: Optional[str] = None
    transaction_control_number: Optional[str] = None
    code: str = ""
    description: str = ""
    segment_id_code: Optional[str] = None
    position: Optional[int] = None
    loop_id: Optional[str] = None
    element_position: Optional[int] = None
    component_position: Optional[int] = None
    element_reference: Optional[str] = None
    bad_value: Optional[str] = None
    error_codes: Tuple[str, ...] = ()
    included_count: Optional[int] = None
    received_count: Optional[int] = None
    accepted_count: Optional[int] = None
    follow_up_action: Optional[str] = None


# ---------------------------------------------------------------------------
# Orchestrator results
# ---------------------------------------------------------------------------


class TransactionResult(FrozenModel):
    """Common shape of every orchestrator result."""

    success: bool
    error_code: Optional[ResultErrorCode] = None
    error: Optional[str] = None
    response_type: Optional[ResponseType] = None
    control_number: Optional[str] = None
    elapsed_ms: int = 0
    acknowledgments: Tuple[AcknowledgmentEntry, ...] = ()
    validation_errors: Tuple[str, ...] = ()


class EligibilityResult(TransactionResult):
    enrolled: bool = False
    payer_id: Optional[str] = None
    payer_name: Optional[str] = None
    eligibility: Optional[EligibilityResponse] = None
    plan: Optional[PlanClassification] = None
    benefits: Optional[BenefitSummary] = None


class ClaimStatusResult(TransactionResult):
    claim_control_number: Optional[str] = None
    overall_status: ClaimStatusOutcome = ClaimStatusOutcome.UNKNOWN
    claim_status: Optional[ClaimStatusResponse] = None


class ClaimSubmissionResult(TransactionResult):
    claim_id: Optional[str] = None
    accepted: bool = False
    claim_status: Optional[ClaimStatusResponse] = None
