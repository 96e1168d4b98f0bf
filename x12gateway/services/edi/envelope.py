"""
Interchange (ISA/IEA), functional group (GS/GE) and transaction set (ST/SE) envelopes.

The builder stamps ISA09/ISA10 and GS04/GS05 with the local wall clock.
Clearinghouses compare the interchange date against their own local day,
and a UTC stamp taken in the evening (US Mountain time) lands on the next
day and is rejected as future-dated.
"""
import time
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from x12gateway.models.domain import FrozenModel
from x12gateway.services.edi.grammar import (
    REPETITION_SEPARATOR,
    COMPONENT_SEPARATOR,
    Segment,
    build_segment,
    element,
    join_segment,
    join_segments,
    split_elements,
    split_segments,
)
from x12gateway.utils.errors import MalformedEnvelope, ValidationError
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

CONTROL_VERSION = "00501"
ISA_ID_WIDTH = 15
AUTHORIZATION_FILLER = " " * 10
TRANSACTION_SET_CONTROL_NUMBER = "0001"

IMPLEMENTATION_GUIDES = {
    "270": "005010X279A1",
    "271": "005010X279A1",
    "276": "005010X212",
    "277": "005010X212",
    "837": "005010X222A1",
    "835": "005010X221A1",
    "999": "005010X231A1",
}

# GS01 functional identifier codes
FUNCTIONAL_IDENTIFIERS = {
    "270": "HS",
    "271": "HB",
    "276": "HR",
    "277": "HN",
    "835": "HP",
    "837": "HC",
    "999": "FA",
}


def clock_control_number() -> str:
    """Last 9 digits of the millisecond clock, zero-padded."""
    millis = time.time_ns() // 1_000_000
    return str(millis)[-9:].zfill(9)


def interchange_timestamps(now: Optional[datetime] = None) -> Tuple[str, str, str]:
    """(YYMMDD, HHMM, CCYYMMDD) from the local wall clock."""
    now = now or datetime.now()
    return now.strftime("%y%m%d"), now.strftime("%H%M"), now.strftime("%Y%m%d")


def pad_interchange_id(value: str) -> str:
    """Right-pad an ISA06/ISA08 identifier to 15 characters."""
    value = (value or "").strip()
    if not value:
        raise ValidationError("Interchange sender and receiver IDs are required", errors=["interchange id is blank"])
    if len(value) > ISA_ID_WIDTH:
        raise ValidationError(
            f"Interchange ID '{value}' exceeds {ISA_ID_WIDTH} characters",
            errors=[f"interchange id longer than {ISA_ID_WIDTH} characters"],
        )
    return value.ljust(ISA_ID_WIDTH)


def build_transaction_set(
    transaction_set_id: str,
    body_segments: Sequence[str],
    control_number: str = TRANSACTION_SET_CONTROL_NUMBER,
    implementation_reference: Optional[str] = None,
) -> List[str]:
    """
    Wrap body segments in ST/SE.

    SE01 is counted from the emitted list, ST through SE inclusive.
    """
    reference = implementation_reference or IMPLEMENTATION_GUIDES.get(transaction_set_id, "")
    segments = [build_segment("ST", transaction_set_id, control_number, reference)]
    segments.extend(body_segments)
    st_index = 0
    se_index = len(segments)
    segments.append(build_segment("SE", str(se_index - st_index + 1), control_number))
    return segments


def build_interchange(
    sender_id: str,
    receiver_id: str,
    control_number: str,
    usage_indicator: str,
    transaction_segments: Sequence[str],
    functional_identifier: str,
    version: str,
    sender_qualifier: str = "ZZ",
    receiver_qualifier: str = "01",
    group_control_number: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a complete interchange around one or more ST..SE transaction sets.

    Args:
        sender_id: ISA06 / GS02 sender
        receiver_id: ISA08 / GS03 receiver
        control_number: 9-digit interchange control number (ISA13 / IEA02)
        usage_indicator: "P" production or "T" test
        transaction_segments: ST..SE segments, without terminators
        functional_identifier: GS01 code (HS, HR, HC)
        version: GS08 implementation guide reference
        group_control_number: GS06 / GE02, defaults to the interchange control number
        now: timestamp to stamp; defaults to the local wall clock

    Returns:
        X12 text with every segment terminated by "~"
    """
    if not (len(control_number) == 9 and control_number.isdigit()):
        raise ValidationError(
            f"Interchange control number must be 9 digits, got '{control_number}'",
            errors=["control number must be 9 digits"],
        )
    if usage_indicator not in ("P", "T"):
        raise ValidationError(
            f"Usage indicator must be P or T, got '{usage_indicator}'",
            errors=["usage indicator must be P or T"],
        )

    yymmdd, hhmm, ccyymmdd = interchange_timestamps(now)
    group_control = group_control_number or control_number
    transaction_count = sum(1 for segment in transaction_segments if segment.startswith("ST*"))

    isa = join_segment(
        [
            "ISA",
            "00",
            AUTHORIZATION_FILLER,
            "00",
            AUTHORIZATION_FILLER,
            sender_qualifier,
            pad_interchange_id(sender_id),
            receiver_qualifier,
            pad_interchange_id(receiver_id),
            yymmdd,
            hhmm,
            REPETITION_SEPARATOR,
            CONTROL_VERSION,
            control_number,
            "0",
            usage_indicator,
            COMPONENT_SEPARATOR,
        ]
    )
    gs = build_segment(
        "GS", functional_identifier, sender_id.strip(), receiver_id.strip(), ccyymmdd, hhmm, group_control, "X", version
    )
    segments = [isa, gs]
    segments.extend(transaction_segments)
    segments.append(build_segment("GE", str(transaction_count), group_control))
    segments.append(build_segment("IEA", "1", control_number))

    logger.debug(
        "Built interchange",
        control_number=control_number,
        functional_identifier=functional_identifier,
        transaction_sets=transaction_count,
        segment_count=len(segments),
    )
    return join_segments(segments)


class InterchangeHeader(FrozenModel):
    sender_qualifier: str
    sender_id: str
    receiver_qualifier: str
    receiver_id: str
    date: str
    time: str
    repetition_separator: str
    version: str
    control_number: str
    acknowledgment_requested: str
    usage_indicator: str
    component_separator: str


class TransactionSet(FrozenModel):
    transaction_set_id: str
    control_number: str
    implementation_reference: str = ""
    segments: Tuple[str, ...] = ()


class FunctionalGroup(FrozenModel):
    functional_identifier: str
    sender_id: str
    receiver_id: str
    date: str
    time: str
    control_number: str
    version: str
    transaction_sets: Tuple[TransactionSet, ...] = ()


class Interchange(FrozenModel):
    header: InterchangeHeader
    groups: Tuple[FunctionalGroup, ...] = ()
    trailer_control_number: str

    @property
    def functional_group(self) -> Optional[FunctionalGroup]:
        return self.groups[0] if self.groups else None

    @property
    def transaction_segments(self) -> List[str]:
        """All ST..SE segments of every group, in order."""
        return [segment for group in self.groups for ts in group.transaction_sets for segment in ts.segments]


def _header_from_isa(isa: Segment) -> InterchangeHeader:
    if len(isa) < 17:
        raise MalformedEnvelope("ISA segment has fewer than 16 elements", details={"elements": len(isa) - 1})
    return InterchangeHeader(
        sender_qualifier=isa[5].strip(),
        sender_id=isa[6].strip(),
        receiver_qualifier=isa[7].strip(),
        receiver_id=isa[8].strip(),
        date=isa[9],
        time=isa[10],
        repetition_separator=isa[11],
        version=isa[12],
        control_number=isa[13],
        acknowledgment_requested=isa[14],
        usage_indicator=isa[15],
        component_separator=isa[16],
    )


def parse_interchange(raw: str) -> Interchange:
    """
    Parse an interchange and verify every envelope invariant.

    Raises:
        MalformedEnvelope: missing header/trailer, mismatched control
            numbers, or trailer counts that disagree with the content
    """
    segments = split_segments(raw)
    if not segments or not segments[0].startswith("ISA"):
        raise MalformedEnvelope("Interchange does not start with ISA")

    header = _header_from_isa(split_elements(segments[0]))
    groups: List[FunctionalGroup] = []
    group: Optional[dict] = None
    current_set: Optional[dict] = None
    trailer_control: Optional[str] = None

    for text in segments[1:]:
        seg = split_elements(text)
        seg_id = seg[0]

        if trailer_control is not None:
            raise MalformedEnvelope("Segments found after IEA", details={"segment": seg_id})

        if current_set is not None:
            current_set["segments"].append(text)
            if seg_id == "SE":
                _close_transaction_set(current_set, seg)
                group["sets"].append(
                    TransactionSet(
                        transaction_set_id=current_set["id"],
                        control_number=current_set["control"],
                        implementation_reference=current_set["reference"],
                        segments=tuple(current_set["segments"]),
                    )
                )
                current_set = None
            continue

        if seg_id == "GS":
            if group is not None:
                raise MalformedEnvelope("GS found before previous group was closed by GE")
            group = {"gs": seg, "sets": []}
        elif seg_id == "ST":
            if group is None:
                raise MalformedEnvelope("ST found outside a functional group")
            current_set = {
                "id": element(seg, 1),
                "control": element(seg, 2),
                "reference": element(seg, 3),
                "segments": [text],
            }
        elif seg_id == "GE":
            if group is None:
                raise MalformedEnvelope("GE found without GS")
            groups.append(_close_group(group, seg))
            group = None
        elif seg_id == "IEA":
            if group is not None:
                raise MalformedEnvelope("IEA found before GE closed the functional group")
            if element(seg, 2) != header.control_number:
                raise MalformedEnvelope(
                    "Interchange control numbers do not match",
                    details={"isa13": header.control_number, "iea02": element(seg, 2)},
                )
            if element(seg, 1) != str(len(groups)):
                raise MalformedEnvelope(
                    "IEA01 does not match the number of functional groups",
                    details={"iea01": element(seg, 1), "groups": len(groups)},
                )
            trailer_control = element(seg, 2)
        elif seg_id == "TA1":
            continue
        else:
            raise MalformedEnvelope(f"Unexpected {seg_id} segment outside a transaction set")

    if current_set is not None:
        raise MalformedEnvelope("Transaction set is missing its SE trailer", details={"st02": current_set["control"]})
    if group is not None:
        raise MalformedEnvelope("Functional group is missing its GE trailer")
    if trailer_control is None:
        raise MalformedEnvelope("Interchange is missing its IEA trailer")

    return Interchange(header=header, groups=tuple(groups), trailer_control_number=trailer_control)


def _close_transaction_set(current_set: dict, se: Segment) -> None:
    if element(se, 2) != current_set["control"]:
        raise MalformedEnvelope(
            "Transaction set control numbers do not match",
            details={"st02": current_set["control"], "se02": element(se, 2)},
        )
    actual = len(current_set["segments"])
    if element(se, 1) != str(actual):
        raise MalformedEnvelope(
            "SE segment count does not match the transaction set",
            details={"se01": element(se, 1), "actual": actual},
        )


def _close_group(group: dict, ge: Segment) -> FunctionalGroup:
    gs = group["gs"]
    if element(ge, 2) != element(gs, 6):
        raise MalformedEnvelope(
            "Functional group control numbers do not match",
            details={"gs06": element(gs, 6), "ge02": element(ge, 2)},
        )
    if element(ge, 1) != str(len(group["sets"])):
        raise MalformedEnvelope(
            "GE01 does not match the number of transaction sets",
            details={"ge01": element(ge, 1), "sets": len(group["sets"])},
        )
    return FunctionalGroup(
        functional_identifier=element(gs, 1),
        sender_id=element(gs, 2),
        receiver_id=element(gs, 3),
        date=element(gs, 4),
        time=element(gs, 5),
        control_number=element(gs, 6),
        version=element(gs, 8),
        transaction_sets=tuple(group["sets"]),
    )


def verify_envelope(segments: Sequence[Segment]) -> None:
    """
    Check whichever envelope pairs a response actually contains.

    Bare transaction fragments pass; a header without its trailer, or a
    header/trailer pair whose control numbers or counts disagree, raises
    MalformedEnvelope.
    """
    isa = [s for s in segments if s[0] == "ISA"]
    iea = [s for s in segments if s[0] == "IEA"]
    if len(isa) != len(iea):
        raise MalformedEnvelope("ISA/IEA segments are not paired", details={"isa": len(isa), "iea": len(iea)})
    for header, trailer in zip(isa, iea):
        if element(header, 13) != element(trailer, 2):
            raise MalformedEnvelope(
                "Interchange control numbers do not match",
                details={"isa13": element(header, 13), "iea02": element(trailer, 2)},
            )

    gs = [s for s in segments if s[0] == "GS"]
    ge = [s for s in segments if s[0] == "GE"]
    if len(gs) != len(ge):
        raise MalformedEnvelope("GS/GE segments are not paired", details={"gs": len(gs), "ge": len(ge)})
    for header, trailer in zip(gs, ge):
        if element(header, 6) != element(trailer, 2):
            raise MalformedEnvelope(
                "Functional group control numbers do not match",
                details={"gs06": element(header, 6), "ge02": element(trailer, 2)},
            )

    st_index: Optional[int] = None
    for index, seg in enumerate(segments):
        if seg[0] == "ST":
            if st_index is not None:
                raise MalformedEnvelope("ST found before previous transaction set was closed")
            st_index = index
        elif seg[0] == "SE":
            if st_index is None:
                raise MalformedEnvelope("SE found without a matching ST")
            st = segments[st_index]
            if element(seg, 2) != element(st, 2):
                raise MalformedEnvelope(
                    "Transaction set control numbers do not match",
                    details={"st02": element(st, 2), "se02": element(seg, 2)},
                )
            actual = index - st_index + 1
            if element(seg, 1) != str(actual):
                raise MalformedEnvelope(
                    "SE segment count does not match the transaction set",
                    details={"se01": element(seg, 1), "actual": actual},
                )
            st_index = None
    if st_index is not None:
        raise MalformedEnvelope("Transaction set is missing its SE trailer")
