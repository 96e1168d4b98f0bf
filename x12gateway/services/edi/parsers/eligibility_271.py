"""
271 eligibility response parser.

A single linear pass over the segments. An EB segment opens a benefit; the
MSG, DTP, REF, III and LS/LE 2120 segments that follow belong to it, and
the next segment of any other kind emits it. Nothing is decided about which
active plan "wins": every EB*1 plan description is kept.
"""
from collections import OrderedDict
from typing import Dict, List, Optional

from x12gateway.models.results import (
    BenefitAmount,
    BenefitSummary,
    EligibilityBenefit,
    EligibilityResponse,
    EntityName,
    SubscriberInfo,
)
from x12gateway.services.edi.code_tables import (
    AAA_REJECT_CODES,
    COVERAGE_LEVEL_CODES,
    ELIGIBILITY_CODES,
    INSURANCE_TYPE_CODES,
    SERVICE_TYPE_CODES,
    TIME_PERIOD_QUALIFIERS,
    describe,
)
from x12gateway.services.edi.grammar import Segment, element, segment_text, split_composite
from x12gateway.services.edi.parsers.base import (
    apply_location,
    contacts_from_per,
    describe_noting,
    dtp_value,
    entity_name,
    freeze_entity,
    load_segments,
    parse_x12_date,
    reference_value,
    reject_reason,
    related_entity,
    transaction_control_number,
)
from x12gateway.services.edi.parsers.cob_271 import parse_271_cob
from x12gateway.utils.decimal_utils import parse_decimal, parse_financial_amount
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

HEALTH_BENEFIT_PLAN_COVERAGE = "30"

# Segments that stay attached to the open benefit
BENEFIT_CHILD_SEGMENTS = frozenset({"MSG", "DTP", "REF", "III", "LS", "LE"})

# NM1 entity codes inside an LS/LE loop, or naming the information receiver
RECEIVER_ENTITY_CODES = frozenset({"1P", "FA", "80", "GP"})


def summarize_benefits(benefits) -> BenefitSummary:
    """
    Copays, deductibles, out-of-pocket maximums and coinsurance by service type.

    One EB contributes to every service type in its EB03 list; an EB without
    EB03 applies to health benefit plan coverage.
    """
    buckets: Dict[str, Dict[str, List[BenefitAmount]]] = {
        "copays": OrderedDict(),
        "deductibles": OrderedDict(),
        "out_of_pocket": OrderedDict(),
        "coinsurance": OrderedDict(),
    }
    for benefit in benefits:
        code = benefit.eligibility_code
        amount = benefit.monetary_amount
        if code == "A" and amount is not None and amount > 0:
            bucket = "copays"
        elif code == "C" and amount is not None:
            bucket = "deductibles"
        elif code == "G" and amount is not None:
            bucket = "out_of_pocket"
        elif code == "B" and benefit.percentage is not None:
            bucket = "coinsurance"
        else:
            continue

        service_types = benefit.service_type_codes or (HEALTH_BENEFIT_PLAN_COVERAGE,)
        for service_type in service_types:
            buckets[bucket].setdefault(service_type, []).append(
                BenefitAmount(
                    service_type_code=service_type,
                    service_type_description=describe(SERVICE_TYPE_CODES, service_type),
                    amount=amount,
                    percentage=benefit.percentage,
                    coverage_level=benefit.coverage_level,
                    time_period=benefit.time_period_qualifier,
                    in_plan_network=benefit.in_plan_network,
                    plan_description=benefit.plan_description,
                )
            )
    return BenefitSummary(
        **{name: {key: tuple(values) for key, values in entries.items()} for name, entries in buckets.items()}
    )


class EligibilityResponseParser:
    """Parse one 271 into an EligibilityResponse."""

    def __init__(self):
        self.warnings: List[str] = []
        self.benefits: List[EligibilityBenefit] = []
        self.messages: List[str] = []
        self.rejections = []
        self.trace_numbers: List[str] = []
        self.payer: Optional[EntityName] = None
        self.information_receiver: Optional[EntityName] = None
        self.patient: Optional[Dict] = None
        self.current_benefit: Optional[Dict] = None
        self.current_entity: Optional[Dict] = None
        self.in_related_loop = False

    def parse(self, raw: str) -> EligibilityResponse:
        segments = load_segments(raw)
        for seg in segments:
            self._handle(seg)
        self._emit_benefit()

        enrolled = bool(self.benefits)
        error = None
        if not enrolled:
            if self.rejections:
                error = f"Eligibility request rejected: {self.rejections[0].description}"
            else:
                error = "Unable to determine eligibility status"

        response = EligibilityResponse(
            enrolled=enrolled,
            benefits=tuple(self.benefits),
            messages=tuple(self.messages),
            payer=self.payer,
            information_receiver=self.information_receiver,
            patient=self._freeze_patient(),
            rejections=tuple(self.rejections),
            error=error,
            transaction_control_number=transaction_control_number(segments),
            trace_numbers=tuple(self.trace_numbers),
            summary=summarize_benefits(self.benefits),
            coordination_of_benefits=parse_271_cob(segments),
            warnings=tuple(self.warnings),
        )
        logger.info(
            "Parsed 271 response",
            enrolled=enrolled,
            benefit_count=len(self.benefits),
            rejection_count=len(self.rejections),
            warning_count=len(self.warnings),
        )
        return response

    def _handle(self, seg: Segment) -> None:
        segment_id = seg[0]

        if self.current_benefit is not None:
            if segment_id in BENEFIT_CHILD_SEGMENTS or (
                self.in_related_loop and segment_id in ("NM1", "N3", "N4", "PER", "PRV")
            ):
                self._handle_benefit_child(seg)
                return
            self._emit_benefit()

        if segment_id == "EB":
            self._open_benefit(seg)
        elif segment_id == "NM1":
            self._handle_name(seg)
        elif segment_id in ("N3", "N4"):
            if self.patient is not None:
                apply_location(self.patient, seg)
        elif segment_id == "DMG":
            if self.patient is not None:
                self.patient["date_of_birth"] = parse_x12_date(element(seg, 2))
                self.patient["gender"] = element(seg, 3) or None
        elif segment_id == "REF":
            if self.patient is not None:
                self.patient["references"].append(reference_value(seg))
        elif segment_id == "DTP":
            if self.patient is not None:
                self.patient["dates"].append(dtp_value(seg))
        elif segment_id == "MSG":
            self.messages.append(element(seg, 1))
        elif segment_id == "AAA":
            rejection = reject_reason(seg)
            describe_noting(AAA_REJECT_CODES, rejection.code, self.warnings, "reject reason")
            self.rejections.append(rejection)
        elif segment_id == "TRN":
            if element(seg, 2):
                self.trace_numbers.append(element(seg, 2))

    def _handle_name(self, seg: Segment) -> None:
        code = element(seg, 1)
        if code == "PR":
            self.payer = entity_name(seg)
        elif code in RECEIVER_ENTITY_CODES:
            self.information_receiver = entity_name(seg)
        elif code in ("IL", "03"):
            # A dependent loop replaces the subscriber as the patient of record
            name = entity_name(seg)
            self.patient = {
                "last_name": name.last_name,
                "first_name": name.first_name,
                "middle_name": name.middle_name,
                "id_qualifier": name.id_qualifier,
                "member_id": name.identifier,
                "references": [],
                "dates": [],
            }

    def _open_benefit(self, seg: Segment) -> None:
        warnings = self.warnings
        code = element(seg, 1)
        coverage = element(seg, 2)
        service_types = tuple(split_composite(element(seg, 3)))
        insurance_type = element(seg, 4)
        time_period = element(seg, 6)
        self.current_benefit = {
            "eligibility_code": code,
            "eligibility_description": describe_noting(ELIGIBILITY_CODES, code, warnings, "eligibility"),
            "coverage_level": coverage,
            "coverage_level_description": (
                describe_noting(COVERAGE_LEVEL_CODES, coverage, warnings, "coverage level") if coverage else ""
            ),
            "service_type_codes": service_types,
            "service_type_descriptions": tuple(
                describe_noting(SERVICE_TYPE_CODES, st, warnings, "service type") for st in service_types
            ),
            "insurance_type_code": insurance_type,
            "insurance_type_description": (
                describe_noting(INSURANCE_TYPE_CODES, insurance_type, warnings, "insurance type")
                if insurance_type
                else ""
            ),
            "plan_description": element(seg, 5),
            "time_period_qualifier": time_period,
            "time_period_description": (
                describe_noting(TIME_PERIOD_QUALIFIERS, time_period, warnings, "time period") if time_period else ""
            ),
            "monetary_amount": parse_financial_amount(element(seg, 7)),
            "percentage": parse_decimal(element(seg, 8)),
            "quantity_qualifier": element(seg, 9),
            "quantity": parse_decimal(element(seg, 10)),
            "authorization_required": element(seg, 11),
            "in_plan_network": element(seg, 12),
            "messages": [],
            "dates": [],
            "references": [],
            "related_entities": [],
            "raw": segment_text(seg),
        }

    def _handle_benefit_child(self, seg: Segment) -> None:
        benefit = self.current_benefit
        segment_id = seg[0]
        if segment_id == "LS":
            self.in_related_loop = True
        elif segment_id == "LE":
            self._close_entity()
            self.in_related_loop = False
        elif self.in_related_loop:
            self._handle_related(seg)
        elif segment_id == "MSG":
            benefit["messages"].append(element(seg, 1))
            self.messages.append(element(seg, 1))
        elif segment_id == "DTP":
            benefit["dates"].append(dtp_value(seg))
        elif segment_id == "REF":
            benefit["references"].append(reference_value(seg))

    def _handle_related(self, seg: Segment) -> None:
        segment_id = seg[0]
        if segment_id == "NM1":
            self._close_entity()
            self.current_entity = related_entity(seg)
            return
        if self.current_entity is None:
            return
        if segment_id in ("N3", "N4"):
            apply_location(self.current_entity, seg)
        elif segment_id == "PER":
            self.current_entity["contacts"].extend(contacts_from_per(seg))
        elif segment_id == "REF":
            self.current_entity["references"].append(reference_value(seg))

    def _close_entity(self) -> None:
        if self.current_entity is not None and self.current_benefit is not None:
            self.current_benefit["related_entities"].append(freeze_entity(self.current_entity))
        self.current_entity = None

    def _emit_benefit(self) -> None:
        if self.current_benefit is None:
            return
        self._close_entity()
        benefit = self.current_benefit
        self.benefits.append(
            EligibilityBenefit(
                **{
                    **benefit,
                    "messages": tuple(benefit["messages"]),
                    "dates": tuple(benefit["dates"]),
                    "references": tuple(benefit["references"]),
                    "related_entities": tuple(benefit["related_entities"]),
                }
            )
        )
        self.current_benefit = None
        self.in_related_loop = False

    def _freeze_patient(self) -> Optional[SubscriberInfo]:
        if self.patient is None:
            return None
        return SubscriberInfo(
            **{
                **self.patient,
                "references": tuple(self.patient["references"]),
                "dates": tuple(self.patient["dates"]),
            }
        )


def parse_271(raw: str) -> EligibilityResponse:
    """Parse a 271 eligibility response."""
    return EligibilityResponseParser().parse(raw)
