"""
835 remittance advice parser.

CLP opens a claim and LX opens a service line under it. CAS segments look
the same at both levels, so each one attaches to whatever is open when it
arrives: the service line if there is one, otherwise the claim.
"""
from typing import Dict, List, Optional

from x12gateway.models.results import (
    AdjustmentDetail,
    AdjustmentGroup,
    EntityName,
    PaymentInfo,
    RemittanceAdvice,
    RemittanceClaim,
    RemittanceServiceLine,
)
from x12gateway.services.edi.code_tables import (
    ADJUSTMENT_GROUP_CODES,
    CLAIM_ADJUSTMENT_REASON_CODES,
    ENTITY_IDENTIFIER_CODES,
    PAYMENT_METHOD_CODES,
    REMITTANCE_CLAIM_STATUS_CODES,
    describe,
)
from x12gateway.services.edi.grammar import COMPONENT_SEPARATOR, Segment, element
from x12gateway.services.edi.parsers.base import (
    amount_noting,
    amount_value,
    describe_noting,
    dtm_value,
    entity_name,
    load_segments,
    parse_x12_date,
    transaction_control_number,
)
from x12gateway.utils.decimal_utils import parse_decimal
from x12gateway.utils.errors import MalformedTransaction
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

PRODUCTION_DATE = "405"
LINE_DATE_QUALIFIERS = frozenset({"472", "150", "151"})
LINE_CONTROL_NUMBER = "6R"
ALLOWED_AMOUNT = "B6"

# CAS02..CAS19: up to six reason/amount/quantity triples
CAS_FIRST_REASON = 2
CAS_TRIPLE_WIDTH = 3


def adjustment_group(seg: Segment, warnings: List[str]) -> AdjustmentGroup:
    """One CAS segment with every reason/amount/quantity triple it packs."""
    group_code = element(seg, 1)
    details = []
    for index in range(CAS_FIRST_REASON, len(seg), CAS_TRIPLE_WIDTH):
        reason = element(seg, index)
        if not reason:
            continue
        details.append(
            AdjustmentDetail(
                reason_code=reason,
                reason_description=describe_noting(
                    CLAIM_ADJUSTMENT_REASON_CODES, reason, warnings, "adjustment reason"
                ),
                amount=amount_noting(element(seg, index + 1), warnings, "adjustment"),
                quantity=parse_decimal(element(seg, index + 2)),
            )
        )
    return AdjustmentGroup(
        group_code=group_code,
        group_description=describe_noting(ADJUSTMENT_GROUP_CODES, group_code, warnings, "adjustment group"),
        adjustments=tuple(details),
    )


def party_from_n1(seg: Segment) -> EntityName:
    code = element(seg, 1)
    return EntityName(
        entity_code=code,
        entity_description=describe(ENTITY_IDENTIFIER_CODES, code),
        entity_type="2",
        last_name=element(seg, 2) or None,
        id_qualifier=element(seg, 3) or None,
        identifier=element(seg, 4) or None,
    )


class RemittanceParser:
    """Parse one 835 into a RemittanceAdvice."""

    def __init__(self):
        self.warnings: List[str] = []
        self.payment: Dict = {}
        self.payer: Optional[EntityName] = None
        self.payee: Optional[EntityName] = None
        self.claims: List[RemittanceClaim] = []
        self.current_claim: Optional[Dict] = None
        self.current_line: Optional[Dict] = None
        self.line_count = 0

    def parse(self, raw: str) -> RemittanceAdvice:
        segments = load_segments(raw)
        for seg in segments:
            self._handle(seg)
        self._close_claim()

        advice = RemittanceAdvice(
            payment=PaymentInfo(**self.payment),
            payer=self.payer,
            payee=self.payee,
            claims=tuple(self.claims),
            transaction_control_number=transaction_control_number(segments),
            warnings=tuple(self.warnings),
        )
        logger.info(
            "Parsed 835 remittance",
            claim_count=len(self.claims),
            payment_method=self.payment.get("method"),
            warning_count=len(self.warnings),
        )
        return advice

    def _handle(self, seg: Segment) -> None:
        segment_id = seg[0]
        if segment_id == "BPR":
            self._handle_bpr(seg)
        elif segment_id == "TRN":
            self.payment["check_number"] = element(seg, 2) or None
            self.payment["originating_company_id"] = element(seg, 3) or None
        elif segment_id == "N1" and self.current_claim is None:
            if element(seg, 1) == "PR":
                self.payer = party_from_n1(seg)
            elif element(seg, 1) == "PE":
                self.payee = party_from_n1(seg)
        elif segment_id == "CLP":
            self._open_claim(seg)
        elif segment_id == "LX":
            if self.current_claim is not None:
                self._open_line(element(seg, 1))
            else:
                logger.warning("LX outside any claim treated as a header number", line_number=element(seg, 1))
        elif segment_id == "SVC":
            self._handle_svc(seg)
        elif segment_id == "CAS":
            self._handle_cas(seg)
        elif segment_id == "DTM":
            self._handle_dtm(seg)
        elif segment_id == "NM1" and self.current_claim is not None:
            if element(seg, 1) == "QC":
                self.current_claim["patient"] = entity_name(seg)
            elif element(seg, 1) == "82":
                self.current_claim["rendering_provider"] = entity_name(seg)
        elif segment_id == "AMT" and self.current_claim is not None:
            value = amount_value(seg)
            if self.current_line is not None and value.qualifier == ALLOWED_AMOUNT:
                self.current_line["allowed_amount"] = value.amount
            else:
                self.current_claim["amounts"].append(value)
        elif segment_id == "REF" and self.current_line is not None:
            if element(seg, 1) == LINE_CONTROL_NUMBER:
                self.current_line["line_control_number"] = element(seg, 2) or None
        elif segment_id == "SE":
            self._close_claim()

    def _handle_bpr(self, seg: Segment) -> None:
        method = element(seg, 4)
        self.payment.update(
            handling_code=element(seg, 1),
            amount=amount_noting(element(seg, 2), self.warnings, "payment"),
            credit_debit=element(seg, 3),
            method=method,
            method_description=describe_noting(PAYMENT_METHOD_CODES, method, self.warnings, "payment method")
            if method
            else "",
            format=element(seg, 5),
            effective_date=parse_x12_date(element(seg, 16)),
        )

    def _handle_dtm(self, seg: Segment) -> None:
        value = dtm_value(seg)
        if self.current_claim is None:
            if value.qualifier == PRODUCTION_DATE:
                self.payment["production_date"] = value.start
            return
        if self.current_line is not None and value.qualifier in LINE_DATE_QUALIFIERS:
            self.current_line["service_date"] = value.start
        else:
            self.current_claim["dates"].append(value)

    def _open_claim(self, seg: Segment) -> None:
        self._close_claim()
        status = element(seg, 2)
        self.current_claim = {
            "claim_id": element(seg, 1),
            "status_code": status,
            "status_description": describe_noting(REMITTANCE_CLAIM_STATUS_CODES, status, self.warnings, "claim status")
            if status
            else "",
            "charge_amount": amount_noting(element(seg, 3), self.warnings, "claim charge"),
            "paid_amount": amount_noting(element(seg, 4), self.warnings, "claim payment"),
            "patient_responsibility": amount_noting(element(seg, 5), self.warnings, "patient responsibility"),
            "filing_indicator": element(seg, 6),
            "payer_claim_control_number": element(seg, 7),
            "facility_code": element(seg, 8),
            "frequency_code": element(seg, 9),
            "patient": None,
            "rendering_provider": None,
            "dates": [],
            "amounts": [],
            "adjustments": [],
            "service_lines": [],
        }
        self.line_count = 0

    def _open_line(self, line_number: Optional[str]) -> None:
        self._close_line()
        self.line_count += 1
        self.current_line = {
            "line_number": line_number or str(self.line_count),
            "has_service": False,
            "adjustments": [],
        }

    def _handle_svc(self, seg: Segment) -> None:
        if self.current_claim is None:
            raise MalformedTransaction("SVC segment found before any CLP", details={"segment": "SVC"})
        if self.current_line is None or self.current_line["has_service"]:
            self._open_line(None)
        parts = element(seg, 1).split(COMPONENT_SEPARATOR)
        self.current_line.update(
            has_service=True,
            procedure_qualifier=parts[0] if parts else "",
            procedure_code=parts[1] if len(parts) > 1 else "",
            modifiers=tuple(part for part in parts[2:] if part),
            charge_amount=amount_noting(element(seg, 2), self.warnings, "line charge"),
            paid_amount=amount_noting(element(seg, 3), self.warnings, "line payment"),
            units=parse_decimal(element(seg, 5)),
        )

    def _handle_cas(self, seg: Segment) -> None:
        if self.current_claim is None:
            raise MalformedTransaction("CAS segment found before any CLP", details={"segment": "CAS"})
        group = adjustment_group(seg, self.warnings)
        target = self.current_line if self.current_line is not None else self.current_claim
        target["adjustments"].append(group)

    def _close_line(self) -> None:
        line = self.current_line
        self.current_line = None
        if line is None:
            return
        if not line["has_service"] and not line["adjustments"]:
            # LX header number with nothing under it
            self.line_count -= 1
            return
        fields = {key: value for key, value in line.items() if key != "has_service"}
        fields["adjustments"] = tuple(line["adjustments"])
        self.current_claim["service_lines"].append(RemittanceServiceLine(**fields))

    def _close_claim(self) -> None:
        if self.current_claim is None:
            return
        self._close_line()
        claim = self.current_claim
        self.claims.append(
            RemittanceClaim(
                **{
                    **claim,
                    "dates": tuple(claim["dates"]),
                    "amounts": tuple(claim["amounts"]),
                    "adjustments": tuple(claim["adjustments"]),
                    "service_lines": tuple(claim["service_lines"]),
                }
            )
        )
        self.current_claim = None


def parse_835(raw: str) -> RemittanceAdvice:
    """Parse an 835 remittance advice."""
    return RemittanceParser().parse(raw)
