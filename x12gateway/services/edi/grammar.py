"""
Segment grammar for X12 005010 text.

Segments end with "~", elements are separated by "*", and repeating or
composite values inside one element use "^". Medical composites such as
STC01, HI and SV101 use the ISA16 component separator ":".

Empty elements are placeholders and are never collapsed: "" means the
element is absent, "0" means the element is zero.
"""
from typing import Iterable, List, Optional, Sequence

SEGMENT_TERMINATOR = "~"
ELEMENT_SEPARATOR = "*"
REPETITION_SEPARATOR = "^"
COMPONENT_SEPARATOR = ":"

DELIMITERS = (SEGMENT_TERMINATOR, ELEMENT_SEPARATOR, REPETITION_SEPARATOR, COMPONENT_SEPARATOR)

Segment = List[str]


def join_segment(elements: Sequence[str]) -> str:
    """Join elements with "*". Values are used exactly as given."""
    return ELEMENT_SEPARATOR.join(elements)


def build_segment(segment_id: str, *elements: Optional[str]) -> str:
    """
    Build a segment, dropping trailing empty elements.

    Interior empty elements are kept as positional placeholders, so
    build_segment("NM1", "IL", "1", "DOE", "JOHN", "", "", "", "", "")
    yields "NM1*IL*1*DOE*JOHN".
    """
    values = ["" if value is None else str(value) for value in elements]
    while values and values[-1] == "":
        values.pop()
    return join_segment([segment_id] + values)


def join_segments(segments: Iterable[str]) -> str:
    """Terminate every segment with "~" and concatenate."""
    return "".join(segment + SEGMENT_TERMINATOR for segment in segments)


def split_segments(raw: str) -> List[str]:
    """Split raw X12 text on "~", dropping blank pieces and line breaks around segments."""
    if not raw:
        return []
    return [piece.strip() for piece in raw.split(SEGMENT_TERMINATOR) if piece.strip()]


def split_elements(segment: str) -> Segment:
    """Split a segment on "*" without collapsing empty elements."""
    return segment.split(ELEMENT_SEPARATOR)


def split_composite(element: str, separator: str = REPETITION_SEPARATOR) -> List[str]:
    """Split a composite or repeated element; an empty element yields an empty list."""
    if not element:
        return []
    return element.split(separator)


def parse_segments(raw: str) -> List[Segment]:
    """Split raw text into a list of element lists."""
    return [split_elements(segment) for segment in split_segments(raw)]


def element(segment: Sequence[str], index: int, default: str = "") -> str:
    """Element at index, or default when the segment is too short."""
    if index < len(segment):
        return segment[index]
    return default


def segment_text(segment: Sequence[str]) -> str:
    """Raw text of a parsed segment, without terminator."""
    return join_segment(segment)


def clean_value(value: Optional[str]) -> str:
    """Upper-case free text and remove delimiter characters so it cannot break the grammar."""
    if value is None:
        return ""
    text = str(value)
    for delimiter in DELIMITERS:
        text = text.replace(delimiter, " ")
    return " ".join(text.split()).upper()
