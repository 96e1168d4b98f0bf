"""Error taxonomy for the X12 codec, transport and orchestrator."""
from typing import Any, List, Optional


class X12Error(Exception):
    """Base error for every failure this package raises."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code or "X12_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class ConfigurationError(X12Error):
    """Programmer error: required configuration is missing or inconsistent."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class ValidationError(X12Error):
    """Input failed pre-flight validation; nothing was sent to the network."""

    def __init__(self, message: str, errors: Optional[List[str]] = None, details: Optional[dict] = None):
        details = dict(details or {})
        details["errors"] = list(errors or [])
        super().__init__(message=message, code="VALIDATION_ERROR", details=details)

    @property
    def errors(self) -> List[str]:
        return self.details["errors"]


class MalformedEnvelope(X12Error):
    """Control numbers or counts in an ISA/GS/ST envelope do not agree."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message=message, code="MALFORMED_ENVELOPE", details=details)


class MalformedTransaction(X12Error):
    """Segment nesting inside a transaction set is not one this parser accepts."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message=message, code="MALFORMED_TRANSACTION", details=details)


class TransportFault(X12Error):
    """The transport reported a fault (SOAP fault, CORE error, non-2xx HTTP)."""

    def __init__(self, fault_code: str, fault_message: str, raw: Optional[str] = None):
        self.fault_code = fault_code
        self.fault_message = fault_message
        self.raw = raw
        super().__init__(
            message=f"Transport fault {fault_code}: {fault_message}",
            code="TRANSPORT_FAULT",
            details={"fault_code": fault_code, "fault_message": fault_message},
        )


class NoPayloadFound(X12Error):
    """A transport response carried neither a fault nor an X12 payload."""

    def __init__(self, message: str = "No X12 payload found in transport response"):
        super().__init__(message=message, code="NO_PAYLOAD")


class FunctionalRejection(X12Error):
    """The clearinghouse or payer answered with a rejecting 999."""

    def __init__(self, entries: List[Any], message: Optional[str] = None):
        self.entries = list(entries)
        super().__init__(
            message=message or f"Transaction rejected with {len(self.entries)} acknowledgment entries",
            code="FUNCTIONAL_REJECTION",
            details={"entry_count": len(self.entries)},
        )
