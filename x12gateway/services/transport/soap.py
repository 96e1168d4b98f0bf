"""
CAQH CORE SOAP envelope codec for real-time X12 exchange.

Credentials travel as a plain WS-Security UsernameToken; confidentiality is
left to the TLS channel the envelope is posted over.
"""
import re
import uuid
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape, unescape

from pydantic import BaseModel, SecretStr

from x12gateway.utils.errors import ConfigurationError, NoPayloadFound, TransportFault
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

SOAP_ACTION = "RealTimeTransaction"
SOAP_CONTENT_TYPE = "application/soap+xml; charset=utf-8;action=RealTimeTransaction;"
SOAP_NAMESPACE = "http://www.w3.org/2003/05/soap-envelope"
WSSE_NAMESPACE = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
CORE_NAMESPACE = "http://www.caqh.org/SOAP/WSDL/CORERule2.2.0.xsd"
CORE_RULE_VERSION = "2.2.0"
PROCESSING_MODE = "RealTime"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

PAYLOAD_TYPES = {
    "270": "X12_270_Request_005010X279A1",
    "276": "X12_276_Request_005010X212",
    "837": "X12_837_Request_005010X222A1",
}

# CORE ErrorCode values that do not indicate a failure
NON_FAULT_ERROR_CODES = frozenset({"", "Success", "None"})

# Tried in order: CDATA/plain x unprefixed/ns1-prefixed
PAYLOAD_PATTERNS = (
    (re.compile(r"<Payload(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</Payload>", re.DOTALL), True),
    (re.compile(r"<Payload(?:\s[^>]*)?>(?!\s*<!\[CDATA\[)(.*?)</Payload>", re.DOTALL), False),
    (re.compile(r"<ns1:Payload(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</ns1:Payload>", re.DOTALL), True),
    (re.compile(r"<ns1:Payload(?:\s[^>]*)?>(?!\s*<!\[CDATA\[)(.*?)</ns1:Payload>", re.DOTALL), False),
)

CDATA_JOIN = "]]><![CDATA["

ERROR_CODE_PATTERN = re.compile(r"<(?:\w+:)?ErrorCode>\s*(.*?)\s*</(?:\w+:)?ErrorCode>", re.DOTALL)
ERROR_MESSAGE_PATTERN = re.compile(r"<(?:\w+:)?ErrorMessage>\s*(.*?)\s*</(?:\w+:)?ErrorMessage>", re.DOTALL)
FAULT_PATTERN = re.compile(r"<(?:\w+:)?Fault[\s>]")
FAULT_CODE_PATTERNS = (
    re.compile(r"<faultcode>\s*(.*?)\s*</faultcode>", re.DOTALL),
    re.compile(r"<(?:\w+:)?Code>\s*<(?:\w+:)?Value>\s*(.*?)\s*</(?:\w+:)?Value>", re.DOTALL),
)
FAULT_MESSAGE_PATTERNS = (
    re.compile(r"<faultstring>\s*(.*?)\s*</faultstring>", re.DOTALL),
    re.compile(r"<(?:\w+:)?Reason>\s*<(?:\w+:)?Text[^>]*>\s*(.*?)\s*</(?:\w+:)?Text>", re.DOTALL),
)


class Credentials(BaseModel):
    """Clearinghouse account; the password never appears in reprs or logs."""

    model_config = {"frozen": True}

    username: str
    password: SecretStr


def payload_type_for(transaction_set_id: str) -> str:
    """CORE PayloadType tag for an outbound transaction set."""
    try:
        return PAYLOAD_TYPES[transaction_set_id]
    except KeyError:
        raise ConfigurationError(
            f"No CORE payload type for transaction set {transaction_set_id}",
            details={"transaction_set_id": transaction_set_id},
        )


def _cdata(payload: str) -> str:
    # "]]>" cannot appear inside one CDATA section
    return "<![CDATA[" + payload.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def wrap_for_transport(
    x12: str,
    credentials: Credentials,
    sender_id: str,
    receiver_id: str,
    payload_type: str,
    payload_id: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> str:
    """Embed an X12 interchange in a CORE real-time request envelope."""
    payload_id = payload_id or str(uuid.uuid4())
    timestamp = timestamp or datetime.now(timezone.utc)
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)

    envelope = (
        f'<soapenv:Envelope xmlns:soapenv="{SOAP_NAMESPACE}">\n'
        "<soapenv:Header>\n"
        f'<wsse:Security xmlns:wsse="{WSSE_NAMESPACE}">\n'
        "<wsse:UsernameToken>\n"
        f"<wsse:Username>{escape(credentials.username)}</wsse:Username>\n"
        f"<wsse:Password>{escape(credentials.password.get_secret_value())}</wsse:Password>\n"
        "</wsse:UsernameToken>\n"
        "</wsse:Security>\n"
        "</soapenv:Header>\n"
        "<soapenv:Body>\n"
        f'<ns1:COREEnvelopeRealTimeRequest xmlns:ns1="{CORE_NAMESPACE}">\n'
        f"<PayloadType>{escape(payload_type)}</PayloadType>\n"
        f"<ProcessingMode>{PROCESSING_MODE}</ProcessingMode>\n"
        f"<PayloadID>{escape(payload_id)}</PayloadID>\n"
        f"<TimeStamp>{timestamp.strftime(TIMESTAMP_FORMAT)}</TimeStamp>\n"
        f"<SenderID>{escape(sender_id)}</SenderID>\n"
        f"<ReceiverID>{escape(receiver_id)}</ReceiverID>\n"
        f"<CORERuleVersion>{CORE_RULE_VERSION}</CORERuleVersion>\n"
        "<Payload>\n"
        f"{_cdata(x12)}\n"
        "</Payload>\n"
        "</ns1:COREEnvelopeRealTimeRequest>\n"
        "</soapenv:Body>\n"
        "</soapenv:Envelope>"
    )
    logger.debug("Wrapped X12 payload", payload_type=payload_type, payload_id=payload_id)
    return envelope


def _first_match(patterns, text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def check_fault(envelope: str) -> None:
    """Raise TransportFault when the envelope reports a CORE error or a SOAP fault."""
    error_code = ERROR_CODE_PATTERN.search(envelope)
    if error_code and error_code.group(1) not in NON_FAULT_ERROR_CODES:
        message = ERROR_MESSAGE_PATTERN.search(envelope)
        raise TransportFault(
            fault_code=error_code.group(1),
            fault_message=unescape(message.group(1)) if message else "",
            raw=envelope,
        )

    if FAULT_PATTERN.search(envelope):
        raise TransportFault(
            fault_code=_first_match(FAULT_CODE_PATTERNS, envelope) or "Fault",
            fault_message=unescape(_first_match(FAULT_MESSAGE_PATTERNS, envelope) or ""),
            raw=envelope,
        )


def unwrap_from_transport(envelope: str) -> str:
    """
    Extract the X12 payload from a CORE real-time response.

    Faults are checked before any payload extraction.
    """
    check_fault(envelope)
    for pattern, is_cdata in PAYLOAD_PATTERNS:
        match = pattern.search(envelope)
        if not match:
            continue
        payload = match.group(1)
        payload = payload.replace(CDATA_JOIN, "") if is_cdata else unescape(payload)
        payload = payload.strip()
        if payload:
            logger.debug("Unwrapped X12 payload", length=len(payload))
            return payload
    logger.warning("No payload in transport response", length=len(envelope))
    raise NoPayloadFound()
