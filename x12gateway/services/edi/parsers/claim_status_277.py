"""
277 claim status response parser.

HL segments are tracked as (id, parent, level, has_children) and NM1 entity
codes attribute names to payer, information receiver, provider or patient.
Claim boundaries come from TRN: TRN*1 always starts a new claim, TRN*2
supplies the referenced trace of the claim already open under the same HL.
"""
from typing import Dict, List, Optional, Tuple

from x12gateway.models.enums import ClaimStatusOutcome
from x12gateway.models.results import (
    ClaimStatusEntry,
    ClaimStatusRecord,
    ClaimStatusResponse,
    ClaimStatusSummary,
    EntityName,
    HierarchicalLevel,
)
from x12gateway.services.edi.code_tables import (
    CLAIM_STATUS_CODES,
    ENTITY_IDENTIFIER_CODES,
    HIERARCHICAL_LEVEL_CODES,
    STATUS_CATEGORY_CODES,
)
from x12gateway.services.edi.grammar import COMPONENT_SEPARATOR, Segment, element, segment_text
from x12gateway.services.edi.parsers.base import (
    amount_value,
    describe_noting,
    dtp_value,
    entity_name,
    load_segments,
    parse_x12_date,
    reference_value,
    transaction_control_number,
)
from x12gateway.utils.decimal_utils import parse_financial_amount
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

CURRENT_TRANSACTION_TRACE = "1"
REFERENCED_TRANSACTION_TRACE = "2"

PATIENT_ENTITY_CODES = frozenset({"IL", "QC"})
PROVIDER_ENTITY_CODES = frozenset({"1P", "85", "FA"})
RECEIVER_ENTITY_CODES = frozenset({"41"})

# Evaluated in order; the first outcome whose categories appear anywhere wins
STATUS_PRECEDENCE: Tuple[Tuple[ClaimStatusOutcome, frozenset], ...] = (
    (ClaimStatusOutcome.PAID, frozenset({"F1"})),
    (ClaimStatusOutcome.DENIED, frozenset({"F2"})),
    (ClaimStatusOutcome.PENDING, frozenset({"P0", "P1"})),
    (ClaimStatusOutcome.ACKNOWLEDGED, frozenset({"A2"})),
    (ClaimStatusOutcome.REJECTED, frozenset({"A6"})),
    (ClaimStatusOutcome.RECEIVED, frozenset({"A1"})),
)

OUTCOME_MESSAGES = {
    ClaimStatusOutcome.PAID: "Claim has been paid",
    ClaimStatusOutcome.DENIED: "Claim has been denied",
    ClaimStatusOutcome.PENDING: "Claim is pending adjudication",
    ClaimStatusOutcome.ACKNOWLEDGED: "Claim has been acknowledged by the payer",
    ClaimStatusOutcome.REJECTED: "Claim was rejected",
    ClaimStatusOutcome.RECEIVED: "Claim has been received",
    ClaimStatusOutcome.UNKNOWN: "Claim status could not be determined",
}


def overall_status(categories) -> ClaimStatusOutcome:
    """Fixed-precedence outcome over every status category seen."""
    present = set(categories)
    for outcome, codes in STATUS_PRECEDENCE:
        if present & codes:
            return outcome
    return ClaimStatusOutcome.UNKNOWN


def summarize_claims(claims) -> ClaimStatusSummary:
    counts: Dict[str, int] = {}
    for claim in claims:
        for status in claim.statuses:
            counts[status.category_code] = counts.get(status.category_code, 0) + 1
    outcome = overall_status(counts)
    if not claims:
        message = "No claim status information found"
    else:
        message = OUTCOME_MESSAGES[outcome]
    return ClaimStatusSummary(
        overall_status=outcome,
        counts_by_category=counts,
        total_claims=len(claims),
        message=message,
    )


class ClaimStatusParser:
    """Parse one 277 into a ClaimStatusResponse."""

    def __init__(self):
        self.warnings: List[str] = []
        self.claims: List[ClaimStatusRecord] = []
        self.levels: List[HierarchicalLevel] = []
        self.current_hl: Optional[str] = None
        self.current_claim: Optional[Dict] = None
        self.pending_patient: Optional[EntityName] = None
        self.payer: Optional[EntityName] = None
        self.provider: Optional[EntityName] = None
        self.information_receiver: Optional[EntityName] = None
        self.reference_identification: Optional[str] = None
        self.transaction_date = None

    def parse(self, raw: str) -> ClaimStatusResponse:
        segments = load_segments(raw)
        for seg in segments:
            self._handle(seg)
        self._close_claim()

        response = ClaimStatusResponse(
            claims=tuple(self.claims),
            payer=self.payer,
            provider=self.provider,
            information_receiver=self.information_receiver,
            levels=tuple(self.levels),
            summary=summarize_claims(self.claims),
            transaction_control_number=transaction_control_number(segments),
            reference_identification=self.reference_identification,
            transaction_date=self.transaction_date,
            warnings=tuple(self.warnings),
        )
        logger.info(
            "Parsed 277 response",
            claim_count=len(self.claims),
            overall_status=response.summary.overall_status.value,
            warning_count=len(self.warnings),
        )
        return response

    def _handle(self, seg: Segment) -> None:
        segment_id = seg[0]
        if segment_id == "BHT":
            self.reference_identification = element(seg, 3) or None
            self.transaction_date = parse_x12_date(element(seg, 4))
        elif segment_id == "HL":
            self._handle_level(seg)
        elif segment_id == "NM1":
            self._handle_name(seg)
        elif segment_id == "TRN":
            self._handle_trace(seg)
        elif segment_id == "SE":
            self._close_claim()
        elif segment_id in ("STC", "REF", "DTP", "AMT"):
            if self.current_claim is None:
                self.warnings.append(f"{segment_id} segment outside any claim was ignored")
                logger.warning("Claim detail segment outside a claim", segment_id=segment_id)
                return
            getattr(self, f"_claim_{segment_id.lower()}")(seg)

    def _handle_level(self, seg: Segment) -> None:
        level_code = element(seg, 3)
        describe_noting(HIERARCHICAL_LEVEL_CODES, level_code, self.warnings, "hierarchical level")
        level = HierarchicalLevel(
            id=element(seg, 1),
            parent_id=element(seg, 2),
            level_code=level_code,
            has_children=element(seg, 4) == "1",
        )
        self.levels.append(level)
        self.current_hl = level.id

    def _handle_name(self, seg: Segment) -> None:
        code = element(seg, 1)
        describe_noting(ENTITY_IDENTIFIER_CODES, code, self.warnings, "entity identifier")
        name = entity_name(seg)
        if code == "PR":
            self.payer = name
        elif code in RECEIVER_ENTITY_CODES:
            self.information_receiver = name
        elif code in PROVIDER_ENTITY_CODES:
            self.provider = name
        elif code in PATIENT_ENTITY_CODES:
            claim = self.current_claim
            # A name under a later HL belongs to the next claim, not the open one
            if claim is not None and claim["patient"] is None and claim["hl_id"] == self.current_hl:
                claim["patient"] = name
            else:
                self.pending_patient = name

    def _handle_trace(self, seg: Segment) -> None:
        trace_type = element(seg, 1)
        trace_number = element(seg, 2)
        if trace_type == CURRENT_TRANSACTION_TRACE:
            self._open_claim(trace_number, element(seg, 3))
        elif trace_type == REFERENCED_TRANSACTION_TRACE:
            claim = self.current_claim
            if claim is not None and claim["hl_id"] == self.current_hl:
                claim["referenced_trace_numbers"].append(trace_number)
            else:
                self._open_claim(None, element(seg, 3))
                self.current_claim["referenced_trace_numbers"].append(trace_number)

    def _open_claim(self, trace_number: Optional[str], originator: str) -> None:
        self._close_claim()
        self.current_claim = {
            "trace_number": trace_number or None,
            "trace_originator": originator or None,
            "referenced_trace_numbers": [],
            "hl_id": self.current_hl,
            "patient": self.pending_patient,
            "statuses": [],
            "references": [],
            "dates": [],
            "amounts": [],
            "claim_control_number": None,
            "payer_claim_control_number": None,
            "service_date": None,
            "claim_amount": None,
        }
        self.pending_patient = None

    def _close_claim(self) -> None:
        claim = self.current_claim
        if claim is None:
            return
        if claim["trace_number"] is None and claim["referenced_trace_numbers"]:
            claim["trace_number"] = claim["referenced_trace_numbers"][0]
        self.claims.append(
            ClaimStatusRecord(
                **{
                    **claim,
                    "referenced_trace_numbers": tuple(claim["referenced_trace_numbers"]),
                    "statuses": tuple(claim["statuses"]),
                    "references": tuple(claim["references"]),
                    "dates": tuple(claim["dates"]),
                    "amounts": tuple(claim["amounts"]),
                }
            )
        )
        self.current_claim = None

    def _status_entry(self, composite: str, seg: Segment, is_additional: bool) -> ClaimStatusEntry:
        parts = composite.split(COMPONENT_SEPARATOR)
        category = parts[0] if parts else ""
        status = parts[1] if len(parts) > 1 else ""
        entity = parts[2] if len(parts) > 2 else ""
        return ClaimStatusEntry(
            category_code=category,
            category_description=describe_noting(STATUS_CATEGORY_CODES, category, self.warnings, "status category"),
            status_code=status,
            status_description=(
                describe_noting(CLAIM_STATUS_CODES, status, self.warnings, "claim status") if status else ""
            ),
            entity_code=entity,
            entity_description=(
                describe_noting(ENTITY_IDENTIFIER_CODES, entity, self.warnings, "entity identifier")
                if entity
                else ""
            ),
            effective_date=parse_x12_date(element(seg, 2)),
            amount=None if is_additional else parse_financial_amount(element(seg, 4)),
            payment_amount=None if is_additional else parse_financial_amount(element(seg, 5)),
            is_additional=is_additional,
            raw=segment_text(seg),
        )

    def _claim_stc(self, seg: Segment) -> None:
        statuses = self.current_claim["statuses"]
        statuses.append(self._status_entry(element(seg, 1), seg, False))
        for index in (10, 11):
            if element(seg, index):
                statuses.append(self._status_entry(element(seg, index), seg, True))

    def _claim_ref(self, seg: Segment) -> None:
        ref = reference_value(seg)
        self.current_claim["references"].append(ref)
        if ref.qualifier == "1K":
            self.current_claim["payer_claim_control_number"] = ref.value
        elif ref.qualifier == "D9":
            self.current_claim["claim_control_number"] = ref.value

    def _claim_dtp(self, seg: Segment) -> None:
        value = dtp_value(seg)
        self.current_claim["dates"].append(value)
        if value.qualifier == "472":
            self.current_claim["service_date"] = value.start

    def _claim_amt(self, seg: Segment) -> None:
        value = amount_value(seg)
        self.current_claim["amounts"].append(value)
        if value.qualifier == "T3":
            self.current_claim["claim_amount"] = value.amount


def parse_277(raw: str) -> ClaimStatusResponse:
    """Parse a 277 claim status response."""
    return ClaimStatusParser().parse(raw)
