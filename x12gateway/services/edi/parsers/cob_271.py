"""
Coordination-of-benefits pass over a 271.

Independent of the EB accumulation: it only looks at LS*2120/LE*2120 loops,
EB*R (other or additional payer) segments and AAA rejections, and reports
whether another payer must be billed first.
"""
from typing import Dict, List, Optional, Sequence, Union

from x12gateway.models.results import CoordinationOfBenefits
from x12gateway.services.edi.grammar import Segment, element
from x12gateway.services.edi.parsers.base import (
    apply_location,
    contacts_from_per,
    freeze_entity,
    load_segments,
    reference_value,
    reject_reason,
    related_entity,
)
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

OTHER_PAYER_LOOP = "2120"
OTHER_OR_ADDITIONAL_PAYER = "R"


def parse_271_cob(source: Union[str, Sequence[Segment]]) -> CoordinationOfBenefits:
    """Other-insurance facts from a raw 271 or its already split segments."""
    segments = load_segments(source) if isinstance(source, str) else source

    other_payers = []
    rejections = []
    references = []
    warnings: List[str] = []
    has_other_insurance = False
    member: Dict[str, Optional[str]] = {"last_name": None, "first_name": None, "member_id": None}
    in_loop = False
    in_subscriber = False
    current: Optional[Dict] = None

    for seg in segments:
        segment_id = seg[0]
        if segment_id == "LS" and element(seg, 1) == OTHER_PAYER_LOOP:
            in_loop = True
            current = None
        elif segment_id == "LE" and element(seg, 1) == OTHER_PAYER_LOOP:
            if current is not None:
                other_payers.append(freeze_entity(current))
            in_loop = False
            current = None
        elif in_loop:
            if segment_id == "NM1":
                if current is not None:
                    other_payers.append(freeze_entity(current))
                current = related_entity(seg)
            elif current is None:
                continue
            elif segment_id in ("N3", "N4"):
                apply_location(current, seg)
            elif segment_id == "PER":
                current["contacts"].extend(contacts_from_per(seg))
            elif segment_id == "REF":
                current["references"].append(reference_value(seg))
        elif segment_id == "EB":
            in_subscriber = False
            if element(seg, 1) == OTHER_OR_ADDITIONAL_PAYER:
                has_other_insurance = True
        elif segment_id == "NM1" and element(seg, 1) in ("IL", "03"):
            in_subscriber = True
            member = {
                "last_name": element(seg, 3) or None,
                "first_name": element(seg, 4) or None,
                "member_id": element(seg, 9) or None,
            }
        elif segment_id == "REF" and in_subscriber:
            references.append(reference_value(seg))
        elif segment_id == "AAA" and element(seg, 1) == "N":
            rejections.append(reject_reason(seg))
        elif segment_id == "HL":
            in_subscriber = False

    if in_loop:
        if current is not None:
            other_payers.append(freeze_entity(current))
        warnings.append("LS*2120 loop was not closed by LE*2120")
        logger.warning("Unclosed 2120 loop in 271 response")

    if other_payers:
        has_other_insurance = True

    return CoordinationOfBenefits(
        has_other_insurance=has_other_insurance,
        other_payers=tuple(other_payers),
        rejections=tuple(rejections),
        member_last_name=member["last_name"],
        member_first_name=member["first_name"],
        member_id=member["member_id"],
        references=tuple(references),
        warnings=tuple(warnings),
    )
