"""
Enumerations shared by the codec, parsers and orchestrator.

Enums are string enums so results serialize to plain JSON values.
"""
import enum


class Gender(str, enum.Enum):
    """Administrative gender as carried in DMG03."""

    MALE = "M"
    FEMALE = "F"
    UNKNOWN = "U"


class EntityType(str, enum.Enum):
    """NM102 entity type qualifier."""

    PERSON = "1"
    ORGANIZATION = "2"


class DtpFormat(str, enum.Enum):
    """Date format for the 270 DTP*291 plan date."""

    D8 = "D8"
    RD8 = "RD8"


class FieldRequirement(str, enum.Enum):
    """How strongly a payer wants a given input field."""

    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"
    NOT_NEEDED = "not_needed"


class PayerCategory(str, enum.Enum):
    """Broad payer family, used by the plan enrichment heuristics."""

    MEDICAID = "Medicaid"
    MEDICAID_MANAGED_CARE = "Medicaid Managed Care"
    MEDICARE = "Medicare"
    COMMERCIAL = "Commercial"


class ResponseType(str, enum.Enum):
    """Transaction set found in a clearinghouse response."""

    ELIGIBILITY_271 = "271"
    CLAIM_STATUS_277 = "277"
    REMITTANCE_835 = "835"
    ACKNOWLEDGMENT_999 = "999"
    UNKNOWN = "unknown"


class AcknowledgmentKind(str, enum.Enum):
    """Kind of entry produced by the 999 parser."""

    SEGMENT_ERROR = "segment_error"
    ELEMENT_ERROR = "element_error"
    TRANSACTION_SET_ACK = "transaction_set_ack"
    FUNCTIONAL_GROUP_ACK = "functional_group_ack"
    APPLICATION_ERROR = "application_error"


class ClaimStatusOutcome(str, enum.Enum):
    """Overall claim status derived from 277 status categories."""

    PAID = "PAID"
    DENIED = "DENIED"
    PENDING = "PENDING"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    REJECTED = "REJECTED"
    RECEIVED = "RECEIVED"
    UNKNOWN = "UNKNOWN"


class PlanType(str, enum.Enum):
    """Heuristic plan classification of an eligibility response."""

    TRADITIONAL_FFS = "Traditional FFS"
    TARGETED_ADULT_FFS = "Traditional FFS (Targeted Adult)"
    MANAGED_CARE = "Managed Care"
    HMO = "HMO"
    PPO = "PPO"
    POS = "POS"
    EPO = "EPO"
    UNKNOWN = "Unknown"


class ResultErrorCode(str, enum.Enum):
    """Failure kinds reported on orchestrator results."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    MALFORMED_ENVELOPE = "MALFORMED_ENVELOPE"
    MALFORMED_TRANSACTION = "MALFORMED_TRANSACTION"
    TRANSPORT_FAULT = "TRANSPORT_FAULT"
    NO_PAYLOAD = "NO_PAYLOAD"
    FUNCTIONAL_REJECTION = "FUNCTIONAL_REJECTION"
    UNRECOGNIZED_RESPONSE = "UNRECOGNIZED_RESPONSE"
