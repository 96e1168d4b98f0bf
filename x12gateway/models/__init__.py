"""
Domain and result models.

Models can be imported from this package directly:
    from x12gateway.models import Patient, EligibilityResponse
"""

from x12gateway.models.enums import (
    AcknowledgmentKind,
    ClaimStatusOutcome,
    DtpFormat,
    EntityType,
    FieldRequirement,
    Gender,
    PayerCategory,
    PlanType,
    ResponseType,
    ResultErrorCode,
)

from x12gateway.models.domain import (
    Address,
    ClaimInquiry,
    ClaimPayer,
    Patient,
    ProfessionalClaim,
    Provider,
    RenderingProvider,
    ServiceLine,
    ValidationResult,
)

from x12gateway.models.results import (
    AcknowledgmentEntry,
    AdjustmentDetail,
    AdjustmentGroup,
    BenefitAmount,
    BenefitSummary,
    ClaimStatusEntry,
    ClaimStatusRecord,
    ClaimStatusResponse,
    ClaimStatusResult,
    ClaimStatusSummary,
    ClaimSubmissionResult,
    CoordinationOfBenefits,
    EligibilityBenefit,
    EligibilityResponse,
    EligibilityResult,
    EntityName,
    OtherPayer,
    PaymentInfo,
    PlanClassification,
    RemittanceAdvice,
    RemittanceClaim,
    RemittanceServiceLine,
    SubscriberInfo,
    TransactionResult,
)

__all__ = [
    "AcknowledgmentKind",
    "ClaimStatusOutcome",
    "DtpFormat",
    "EntityType",
    "FieldRequirement",
    "Gender",
    "PayerCategory",
    "PlanType",
    "ResponseType",
    "ResultErrorCode",
    "Address",
    "ClaimInquiry",
    "ClaimPayer",
    "Patient",
    "ProfessionalClaim",
    "Provider",
    "RenderingProvider",
    "ServiceLine",
    "ValidationResult",
    "AcknowledgmentEntry",
    "AdjustmentDetail",
    "AdjustmentGroup",
    "BenefitAmount",
    "BenefitSummary",
    "ClaimStatusEntry",
    "ClaimStatusRecord",
    "ClaimStatusResponse",
    "ClaimStatusResult",
    "ClaimStatusSummary",
    "ClaimSubmissionResult",
    "CoordinationOfBenefits",
    "EligibilityBenefit",
    "EligibilityResponse",
    "EligibilityResult",
    "EntityName",
    "OtherPayer",
    "PaymentInfo",
    "PlanClassification",
    "RemittanceAdvice",
    "RemittanceClaim",
    "RemittanceServiceLine",
    "SubscriberInfo",
    "TransactionResult",
]
