"""Classify a clearinghouse response by the transaction set it carries."""
from x12gateway.models.enums import ResponseType
from x12gateway.services.edi.grammar import element, parse_segments
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

TRANSACTION_SET_TYPES = {
    "271": ResponseType.ELIGIBILITY_271,
    "277": ResponseType.CLAIM_STATUS_277,
    "835": ResponseType.REMITTANCE_835,
    "999": ResponseType.ACKNOWLEDGMENT_999,
    "997": ResponseType.ACKNOWLEDGMENT_999,
}

FUNCTIONAL_GROUP_TYPES = {
    "HB": ResponseType.ELIGIBILITY_271,
    "HN": ResponseType.CLAIM_STATUS_277,
    "HP": ResponseType.REMITTANCE_835,
    "FA": ResponseType.ACKNOWLEDGMENT_999,
}


def classify_response(x12: str) -> ResponseType:
    """ST01 decides; GS01 is the fallback when no ST is present."""
    segments = parse_segments(x12 or "")
    functional_identifier = None
    for seg in segments:
        if seg[0] == "ST":
            response_type = TRANSACTION_SET_TYPES.get(element(seg, 1), ResponseType.UNKNOWN)
            logger.debug("Classified response", transaction_set_id=element(seg, 1), response_type=response_type.value)
            return response_type
        if seg[0] == "GS" and functional_identifier is None:
            functional_identifier = element(seg, 1)

    response_type = FUNCTIONAL_GROUP_TYPES.get(functional_identifier or "", ResponseType.UNKNOWN)
    logger.debug("Classified response without ST", functional_identifier=functional_identifier, response_type=response_type.value)
    return response_type
