"""
Transaction orchestrator: validate, generate, wrap, send, unwrap, classify, parse.

Each public method is one linear pipeline with no retry. Expected unhappy
outcomes (bad input, 999 rejections, transport faults, unrecognized
responses) come back as results with success=False; only configuration
mistakes and errors outside the X12 taxonomy are raised.
"""
import time
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple, Type, TypeVar, Union

from x12gateway.config.payers import PayerDirectory
from x12gateway.config.settings import ClearinghouseSettings, get_settings
from x12gateway.core.setup import ensure_logging_configured
from x12gateway.models.domain import ClaimInquiry, Patient, ProfessionalClaim, Provider
from x12gateway.models.enums import ClaimStatusOutcome, ResponseType, ResultErrorCode
from x12gateway.models.results import (
    ClaimStatusResult,
    ClaimSubmissionResult,
    EligibilityResult,
    TransactionResult,
)
from x12gateway.services.edi.enrichment import classify_plan
from x12gateway.services.edi.envelope import clock_control_number
from x12gateway.services.edi.generators.claim_status_276 import generate_276
from x12gateway.services.edi.generators.eligibility_270 import generate_270
from x12gateway.services.edi.generators.professional_claim_837p import generate_837p, resolve_claim_id
from x12gateway.services.edi.parsers.acknowledgment_999 import describe_entries, is_accepted, parse_999
from x12gateway.services.edi.parsers.claim_status_277 import parse_277
from x12gateway.services.edi.parsers.detector import classify_response
from x12gateway.services.edi.parsers.eligibility_271 import parse_271
from x12gateway.services.transport.soap import Credentials, payload_type_for, unwrap_from_transport, wrap_for_transport
from x12gateway.utils.errors import ConfigurationError, FunctionalRejection, ValidationError, X12Error
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=TransactionResult)

# 277CA outcomes that mean the payer did not take the claim
UNACCEPTED_CLAIM_OUTCOMES = frozenset(
    {ClaimStatusOutcome.REJECTED, ClaimStatusOutcome.DENIED, ClaimStatusOutcome.UNKNOWN}
)


class Transport(Protocol):
    def send(self, envelope: str) -> str:
        ...


class ResultSink(Protocol):
    """Where finished transaction summaries are recorded (audit log, cache)."""

    def record(self, key: str, entry: Mapping[str, Any]) -> None:
        ...


class TransactionOrchestrator:
    """Runs 270/271, 276/277 and 837P/999 exchanges against one clearinghouse."""

    def __init__(
        self,
        transport: Transport,
        payers: Optional[PayerDirectory] = None,
        provider: Optional[Provider] = None,
        settings: Optional[ClearinghouseSettings] = None,
        credentials: Optional[Credentials] = None,
        result_sink: Optional[ResultSink] = None,
        clock: Callable[[], float] = time.monotonic,
        control_numbers: Callable[[], str] = clock_control_number,
    ):
        self.settings = settings or get_settings()
        ensure_logging_configured(self.settings)
        if not self.settings.sender_id:
            raise ConfigurationError("X12 sender ID is not configured", details={"setting": "X12_SENDER_ID"})
        if credentials is None:
            if not self.settings.username:
                raise ConfigurationError(
                    "Clearinghouse credentials are not configured", details={"setting": "CLEARINGHOUSE_USERNAME"}
                )
            credentials = Credentials(username=self.settings.username, password=self.settings.password)

        self.transport = transport
        self.payers = payers or PayerDirectory()
        self.provider = provider
        self.credentials = credentials
        self.result_sink = result_sink
        self.clock = clock
        self.control_numbers = control_numbers
        self.parties = self.settings.interchange_parties()
        self.claims_parties = self.settings.interchange_parties(for_claims=True)

    # ------------------------------------------------------------------
    # Public flows
    # ------------------------------------------------------------------

    def check_eligibility(self, patient: Patient, payer_id: str) -> EligibilityResult:
        """270 out, 271 (or 999) back."""
        start = self.clock()
        payer = self.payers.get(payer_id)
        if self.provider is None:
            raise ConfigurationError("An information receiver provider is required for eligibility checks")
        control_number = self.control_numbers()

        try:
            x12 = generate_270(patient, payer, self.provider, control_number=control_number, parties=self.parties)
            response_type, payload = self._exchange("270", x12)
            if response_type == ResponseType.ELIGIBILITY_271:
                response = parse_271(payload)
                result = EligibilityResult(
                    success=True,
                    response_type=response_type,
                    control_number=control_number,
                    elapsed_ms=self._elapsed(start),
                    enrolled=response.enrolled,
                    payer_id=payer.payer_id,
                    payer_name=payer.payer_display_name,
                    eligibility=response,
                    plan=classify_plan(response, payer),
                    benefits=response.summary,
                )
            else:
                result = self._unexpected(EligibilityResult, response_type, payload, control_number, start)
                result = result.model_copy(update={"payer_id": payer.payer_id, "payer_name": payer.payer_display_name})
        except ConfigurationError:
            raise
        except X12Error as e:
            result = self._failure(EligibilityResult, e, control_number, start)
            result = result.model_copy(update={"payer_id": payer.payer_id, "payer_name": payer.payer_display_name})

        logger.info(
            "Eligibility check completed",
            payer_id=payer.payer_id,
            control_number=control_number,
            success=result.success,
            enrolled=result.enrolled,
            error_code=result.error_code.value if result.error_code else None,
            elapsed_ms=result.elapsed_ms,
        )
        self._record("270", control_number, result)
        return result

    def check_claim_status(self, inquiry: Union[ClaimInquiry, Mapping[str, Any]]) -> ClaimStatusResult:
        """276 out, 277 (or 999) back."""
        start = self.clock()
        control_number = self.control_numbers()
        claim_control_number = (
            inquiry.get("claim_control_number") if isinstance(inquiry, Mapping) else inquiry.claim_control_number
        )

        try:
            x12 = generate_276(inquiry, control_number=control_number, parties=self.parties)
            response_type, payload = self._exchange("276", x12)
            if response_type == ResponseType.CLAIM_STATUS_277:
                response = parse_277(payload)
                result = ClaimStatusResult(
                    success=True,
                    response_type=response_type,
                    control_number=control_number,
                    elapsed_ms=self._elapsed(start),
                    claim_control_number=claim_control_number,
                    overall_status=response.summary.overall_status,
                    claim_status=response,
                )
            else:
                result = self._unexpected(ClaimStatusResult, response_type, payload, control_number, start)
        except ConfigurationError:
            raise
        except X12Error as e:
            result = self._failure(ClaimStatusResult, e, control_number, start)
        if result.claim_control_number is None:
            result = result.model_copy(update={"claim_control_number": claim_control_number})

        logger.info(
            "Claim status check completed",
            control_number=control_number,
            success=result.success,
            overall_status=result.overall_status.value,
            error_code=result.error_code.value if result.error_code else None,
            elapsed_ms=result.elapsed_ms,
        )
        self._record("276", control_number, result)
        return result

    def submit_claim(self, claim: ProfessionalClaim) -> ClaimSubmissionResult:
        """837P out; an accepting 999 (or a 277CA) back."""
        start = self.clock()
        control_number = self.control_numbers()
        claim_id = resolve_claim_id(claim, control_number)

        try:
            x12 = generate_837p(claim, control_number=control_number, parties=self.claims_parties)
            response_type, payload = self._exchange("837", x12)
            if response_type == ResponseType.ACKNOWLEDGMENT_999:
                entries = parse_999(payload)
                if not is_accepted(entries):
                    raise FunctionalRejection(entries, message=self._rejection_message(entries))
                result = ClaimSubmissionResult(
                    success=True,
                    response_type=response_type,
                    control_number=control_number,
                    elapsed_ms=self._elapsed(start),
                    acknowledgments=tuple(entries),
                    claim_id=claim_id,
                    accepted=True,
                )
            elif response_type == ResponseType.CLAIM_STATUS_277:
                response = parse_277(payload)
                result = ClaimSubmissionResult(
                    success=True,
                    response_type=response_type,
                    control_number=control_number,
                    elapsed_ms=self._elapsed(start),
                    claim_id=claim_id,
                    accepted=response.summary.overall_status not in UNACCEPTED_CLAIM_OUTCOMES,
                    claim_status=response,
                )
            else:
                result = self._unexpected(ClaimSubmissionResult, response_type, payload, control_number, start)
        except ConfigurationError:
            raise
        except X12Error as e:
            result = self._failure(ClaimSubmissionResult, e, control_number, start)
        if result.claim_id is None:
            result = result.model_copy(update={"claim_id": claim_id})

        logger.info(
            "Claim submission completed",
            payer_id=claim.payer.claims_payer_id,
            control_number=control_number,
            success=result.success,
            accepted=result.accepted,
            error_code=result.error_code.value if result.error_code else None,
            elapsed_ms=result.elapsed_ms,
        )
        self._record("837", control_number, result)
        return result

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _exchange(self, transaction_set_id: str, x12: str) -> Tuple[ResponseType, str]:
        envelope = wrap_for_transport(
            x12,
            self.credentials,
            sender_id=self.parties.sender_id,
            receiver_id=self.parties.receiver_id,
            payload_type=payload_type_for(transaction_set_id),
        )
        response = self.transport.send(envelope)
        payload = unwrap_from_transport(response)
        response_type = classify_response(payload)
        logger.debug("Classified clearinghouse response", request=transaction_set_id, response_type=response_type.value)
        return response_type, payload

    def _unexpected(
        self,
        result_cls: Type[ResultT],
        response_type: ResponseType,
        payload: str,
        control_number: str,
        start: float,
    ) -> ResultT:
        """999 for an inquiry, or a response nobody asked for."""
        if response_type == ResponseType.ACKNOWLEDGMENT_999:
            entries = parse_999(payload)
            error = FunctionalRejection(entries, message=self._rejection_message(entries))
            return self._failure(result_cls, error, control_number, start, response_type=response_type)
        return result_cls(
            success=False,
            error_code=ResultErrorCode.UNRECOGNIZED_RESPONSE,
            error=f"Unrecognized response type: {response_type.value}",
            response_type=response_type,
            control_number=control_number,
            elapsed_ms=self._elapsed(start),
        )

    def _failure(
        self,
        result_cls: Type[ResultT],
        error: X12Error,
        control_number: str,
        start: float,
        response_type: Optional[ResponseType] = None,
    ) -> ResultT:
        fields: Dict[str, Any] = {
            "success": False,
            "error_code": ResultErrorCode(error.code),
            "error": error.message,
            "control_number": control_number,
            "elapsed_ms": self._elapsed(start),
        }
        if isinstance(error, ValidationError):
            fields["validation_errors"] = tuple(error.errors)
        if isinstance(error, FunctionalRejection):
            fields["acknowledgments"] = tuple(error.entries)
            fields["response_type"] = response_type or ResponseType.ACKNOWLEDGMENT_999
        logger.warning("Transaction failed", error_code=error.code, control_number=control_number)
        return result_cls(**fields)

    @staticmethod
    def _rejection_message(entries) -> str:
        lines = describe_entries(entries)
        if not lines:
            return "Transaction rejected by functional acknowledgment"
        return "Transaction rejected: " + "; ".join(lines)

    def _elapsed(self, start: float) -> int:
        return int((self.clock() - start) * 1000)

    def _record(self, transaction_set_id: str, control_number: str, result: TransactionResult) -> None:
        if self.result_sink is None:
            return
        entry = {
            "transaction_set_id": transaction_set_id,
            "control_number": control_number,
            "success": result.success,
            "error_code": result.error_code.value if result.error_code else None,
            "response_type": result.response_type.value if result.response_type else None,
            "elapsed_ms": result.elapsed_ms,
            "recorded_at": datetime.now().isoformat(),
        }
        try:
            self.result_sink.record(f"{transaction_set_id}:{control_number}", entry)
        except Exception as e:
            logger.warning("Result sink failed", control_number=control_number, error=str(e))
