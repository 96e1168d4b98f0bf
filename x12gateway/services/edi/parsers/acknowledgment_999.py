"""
999 (and legacy 997) functional acknowledgment parser.

Every IK3/AK3, IK4/AK4, IK5/AK5, AK9 and AAA segment becomes one flat entry
that keeps its raw segment text next to the decoded fields.
"""
from typing import Iterable, List, Optional, Tuple

from x12gateway.models.enums import AcknowledgmentKind
from x12gateway.models.results import AcknowledgmentEntry
from x12gateway.services.edi.code_tables import (
    AAA_REJECT_CODES,
    ACCEPTED_ACKNOWLEDGMENT_CODES,
    ACKNOWLEDGMENT_CODES,
    ELEMENT_ERROR_CODES,
    SEGMENT_ERROR_CODES,
    TRANSACTION_SET_ERROR_CODES,
    describe,
)
from x12gateway.services.edi.grammar import COMPONENT_SEPARATOR, Segment, element, segment_text
from x12gateway.services.edi.parsers.base import load_segments
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

ERROR_KINDS = frozenset(
    {AcknowledgmentKind.SEGMENT_ERROR, AcknowledgmentKind.ELEMENT_ERROR, AcknowledgmentKind.APPLICATION_ERROR}
)
ACK_KINDS = frozenset({AcknowledgmentKind.TRANSACTION_SET_ACK, AcknowledgmentKind.FUNCTIONAL_GROUP_ACK})


def _int(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value.isdigit() else None


def _element_position(value: str) -> Tuple[Optional[int], Optional[int]]:
    """IK401 is either "10" or "10:1" (element position, component position)."""
    position, _, component = value.partition(COMPONENT_SEPARATOR)
    return _int(position), _int(component) if component else None


def _codes(seg: Segment, start: int, stop: int) -> Tuple[str, ...]:
    return tuple(code for code in (element(seg, index) for index in range(start, stop)) if code)


def parse_999(raw: str) -> List[AcknowledgmentEntry]:
    """Flat list of diagnostic entries, in segment order."""
    entries: List[AcknowledgmentEntry] = []
    set_id: Optional[str] = None
    set_control: Optional[str] = None

    for seg in load_segments(raw):
        segment_id = seg[0]
        context = {
            "segment_id": segment_id,
            "raw": segment_text(seg),
            "transaction_set_id": set_id,
            "transaction_control_number": set_control,
        }

        if segment_id in ("AK2", "IK2"):
            set_id = element(seg, 1) or None
            set_control = element(seg, 2) or None
        elif segment_id in ("IK3", "AK3"):
            code = element(seg, 4)
            entries.append(
                AcknowledgmentEntry(
                    kind=AcknowledgmentKind.SEGMENT_ERROR,
                    code=code,
                    description=describe(SEGMENT_ERROR_CODES, code) if code else "",
                    segment_id_code=element(seg, 1) or None,
                    position=_int(element(seg, 2)),
                    loop_id=element(seg, 3) or None,
                    **context,
                )
            )
        elif segment_id in ("IK4", "AK4"):
            code = element(seg, 3)
            position, component = _element_position(element(seg, 1))
            entries.append(
                AcknowledgmentEntry(
                    kind=AcknowledgmentKind.ELEMENT_ERROR,
                    code=code,
                    description=describe(ELEMENT_ERROR_CODES, code) if code else "",
                    element_position=position,
                    component_position=component,
                    element_reference=element(seg, 2) or None,
                    bad_value=element(seg, 4) or None,
                    **context,
                )
            )
        elif segment_id in ("IK5", "AK5"):
            code = element(seg, 1)
            entries.append(
                AcknowledgmentEntry(
                    kind=AcknowledgmentKind.TRANSACTION_SET_ACK,
                    code=code,
                    description=describe(ACKNOWLEDGMENT_CODES, code),
                    error_codes=_codes(seg, 2, 7),
                    **context,
                )
            )
        elif segment_id == "AK9":
            code = element(seg, 1)
            entries.append(
                AcknowledgmentEntry(
                    kind=AcknowledgmentKind.FUNCTIONAL_GROUP_ACK,
                    code=code,
                    description=describe(ACKNOWLEDGMENT_CODES, code),
                    included_count=_int(element(seg, 2)),
                    received_count=_int(element(seg, 3)),
                    accepted_count=_int(element(seg, 4)),
                    error_codes=_codes(seg, 5, 10),
                    **{**context, "transaction_set_id": None, "transaction_control_number": None},
                )
            )
        elif segment_id == "AAA":
            code = element(seg, 3)
            entries.append(
                AcknowledgmentEntry(
                    kind=AcknowledgmentKind.APPLICATION_ERROR,
                    code=code,
                    description=describe(AAA_REJECT_CODES, code) if code else "",
                    follow_up_action=element(seg, 4) or None,
                    **context,
                )
            )

    logger.info(
        "Parsed 999 acknowledgment",
        entry_count=len(entries),
        error_count=sum(1 for entry in entries if entry.kind in ERROR_KINDS),
    )
    return entries


def is_accepted(entries: Iterable[AcknowledgmentEntry]) -> bool:
    """
    True when the acknowledgment accepts the submission.

    Requires at least one IK5/AK9 result, every one of them A or E, and no
    segment, element or application errors.
    """
    entries = list(entries)
    acks = [entry for entry in entries if entry.kind in ACK_KINDS]
    if not acks:
        return False
    if any(entry.kind in ERROR_KINDS for entry in entries):
        return False
    return all(entry.code in ACCEPTED_ACKNOWLEDGMENT_CODES for entry in acks)


def describe_entries(entries: Iterable[AcknowledgmentEntry]) -> List[str]:
    """One human-readable line per entry."""
    lines = []
    for entry in entries:
        if entry.kind == AcknowledgmentKind.SEGMENT_ERROR:
            lines.append(f"Segment {entry.segment_id_code} at position {entry.position}: {entry.description}")
        elif entry.kind == AcknowledgmentKind.ELEMENT_ERROR:
            line = f"Element {entry.element_position}"
            if entry.element_reference:
                line += f" ({entry.element_reference})"
            line += f": {entry.description}"
            if entry.bad_value:
                line += f" [value: {entry.bad_value}]"
            lines.append(line)
        elif entry.kind == AcknowledgmentKind.TRANSACTION_SET_ACK:
            line = f"Transaction set {entry.transaction_control_number or ''}".rstrip() + f": {entry.description}"
            if entry.error_codes:
                reasons = ", ".join(describe(TRANSACTION_SET_ERROR_CODES, code) for code in entry.error_codes)
                line += f" ({reasons})"
            lines.append(line)
        elif entry.kind == AcknowledgmentKind.FUNCTIONAL_GROUP_ACK:
            lines.append(
                f"Functional group: {entry.description} "
                f"({entry.accepted_count}/{entry.included_count} transaction sets accepted)"
            )
        else:
            lines.append(f"Application error {entry.code}: {entry.description}")
    return lines
