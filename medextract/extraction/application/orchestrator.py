"""
Extraction orchestrator: top-level entry of the Extraction domain.

Sequencing:
- force_method="ocr": OCR only, final method "ocr" whatever the outcome
- force_method="ai": AI only, "failed" if the call fails
- auto: AI first (if preferred and configured), accepted only with at least
  one parameter; otherwise OCR; "failed" if OCR fails too

Each call is an explicit state machine

    NOT_STARTED -> [AI_TRIED] -> [OCR_TRIED] -> FINALIZED

with an append-only attempt log. extract() never raises. A collaborator that
crashes counts as a failed attempt of its method; cancellation and deadline
expiry end as a result with method "failed".
"""

import time
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from loguru import logger

from config.settings import (
    AI_CALL_TIMEOUT_SECONDS,
    EXTRACTION_TIMEOUT_SECONDS,
    INCLUDE_INSIGHTS,
    NO_TEXT_SENTINEL,
    PREFER_AI,
)
from contracts.extraction_result_dto import (
    AIInsights,
    ExtractionAttempt,
    ExtractionLog,
    ExtractionMethod,
    ExtractionOptions,
    ExtractionResult,
    HealthParameter,
    PatientInfo,
    RawDocument,
)
from medextract.domain.contracts import AIExtractionOutcome, OCRExtractionOutcome
from ..domain.exceptions import (
    AIProviderError,
    ExtractionCancelledError,
    ExtractionError,
    ExtractionTimeoutError,
)
from ..domain.interfaces import IAIExtractor
from ..infrastructure.execution import CancellationToken, ExtractionContext, call_external
from .insights import generate_basic_insights
from .ocr_method import OcrExtractionMethod

COMPONENT = "Orchestrator"


class ExtractionState(str, Enum):
    NOT_STARTED = "not_started"
    AI_TRIED = "ai_tried"
    OCR_TRIED = "ocr_tried"
    FINALIZED = "finalized"


_TRANSITIONS: Dict[ExtractionState, FrozenSet[ExtractionState]] = {
    ExtractionState.NOT_STARTED: frozenset(
        {ExtractionState.AI_TRIED, ExtractionState.OCR_TRIED, ExtractionState.FINALIZED}
    ),
    ExtractionState.AI_TRIED: frozenset({ExtractionState.OCR_TRIED, ExtractionState.FINALIZED}),
    ExtractionState.OCR_TRIED: frozenset({ExtractionState.FINALIZED}),
    ExtractionState.FINALIZED: frozenset(),
}


class IllegalStateTransition(RuntimeError):
    """Programming error: the orchestrator tried a transition the state machine forbids."""


class AttemptLog:
    """Append-only, chronological record of method attempts."""

    def __init__(self) -> None:
        self._attempts: List[ExtractionAttempt] = []
        self._errors: List[str] = []

    def append(self, attempt: ExtractionAttempt) -> None:
        self._attempts.append(attempt)
        if attempt.error:
            self._errors.append(f"{attempt.method.value}: {attempt.error}")

    def note_error(self, message: str) -> None:
        self._errors.append(message)

    @property
    def attempts(self) -> Tuple[ExtractionAttempt, ...]:
        return tuple(self._attempts)

    @property
    def error_summary(self) -> Optional[str]:
        return "; ".join(self._errors) if self._errors else None


class ExtractionRun:
    """State of one extract() call."""

    def __init__(self, context: ExtractionContext):
        self.context = context
        self.state = ExtractionState.NOT_STARTED
        self.log = AttemptLog()
        self.started_at = time.perf_counter()

    def advance(self, target: ExtractionState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise IllegalStateTransition(f"{self.state.value} -> {target.value}")
        logger.trace(f"[{COMPONENT}] {self.state.value} -> {target.value}")
        self.state = target

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000


class ExtractionOrchestrator:
    """
    AI-first, OCR-fallback extraction with an audit trail.

    Both methods receive the same request context (deadline + cancellation).
    """

    def __init__(
        self,
        ocr_method: OcrExtractionMethod,
        ai_extractor: Optional[IAIExtractor] = None,
        default_timeout: float = EXTRACTION_TIMEOUT_SECONDS,
        ai_call_timeout: float = AI_CALL_TIMEOUT_SECONDS
    ):
        self.ocr_method = ocr_method
        self.ai_extractor = ai_extractor
        self.default_timeout = default_timeout
        self.ai_call_timeout = ai_call_timeout

    @property
    def ai_available(self) -> bool:
        return self.ai_extractor is not None and self.ai_extractor.is_configured

    def extract(
        self,
        document: RawDocument,
        options: Optional[ExtractionOptions] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> ExtractionResult:
        """
        Extracts health parameters from one document. Never raises.

        Args:
            document: Buffer + MIME type
            options: Method selection, insights, deadline
            cancel_token: Caller-owned token to abort the request

        Returns:
            ExtractionResult with the attempt log
        """
        options = options or ExtractionOptions(prefer_ai=PREFER_AI, include_insights=INCLUDE_INSIGHTS)
        context = ExtractionContext.create(options.timeout_seconds or self.default_timeout, cancel_token)
        run = ExtractionRun(context)

        logger.info(
            f"[{COMPONENT}] Start: {document.mime_type}, {len(document.buffer) / 1024:.1f}KB, "
            f"method={options.force_method or 'auto'}"
        )

        try:
            context.check(COMPONENT)
            if options.force_method == "ocr":
                return self._run_forced_ocr(run, document, options)
            if options.force_method == "ai":
                return self._run_forced_ai(run, document, options)
            return self._run_auto(run, document, options)
        except (ExtractionCancelledError, ExtractionTimeoutError) as e:
            logger.warning(f"[{COMPONENT}] Aborted: {e.message}")
            if options.force_method and run.state is ExtractionState.NOT_STARTED:
                self._record_skipped_attempt(run, options.force_method, e.message)
            else:
                run.log.note_error(e.message)
            return self._finalize_failed(run)
        except Exception as e:
            logger.exception(f"[{COMPONENT}] Unexpected failure: {e}")
            run.log.note_error(f"{type(e).__name__}: {e}")
            return self._finalize_failed(run)

    # ------------------------------------------------------------------ modes

    def _run_forced_ocr(self, run: ExtractionRun, document: RawDocument, options: ExtractionOptions) -> ExtractionResult:
        logger.info(f"[{COMPONENT}] Forced OCR extraction")
        ocr = self._attempt_ocr(run, document)
        return self._finalize_ocr(run, ocr, options)

    def _run_forced_ai(self, run: ExtractionRun, document: RawDocument, options: ExtractionOptions) -> ExtractionResult:
        logger.info(f"[{COMPONENT}] Forced AI extraction")
        ai = self._attempt_ai(run, document)
        if ai.success:
            return self._finalize_ai(run, ai, options)
        logger.error(f"[{COMPONENT}] AI extraction failed (forced mode)")
        return self._finalize_failed(run)

    def _run_auto(self, run: ExtractionRun, document: RawDocument, options: ExtractionOptions) -> ExtractionResult:
        if options.prefer_ai and self.ai_available:
            ai = self._attempt_ai(run, document)
            if ai.success and ai.health_parameters:
                return self._finalize_ai(run, ai, options)
            reason = ai.error or "no parameters found"
            logger.warning(f"[{COMPONENT}] AI not usable ({reason}), falling back to OCR")
        elif options.prefer_ai:
            logger.warning(f"[{COMPONENT}] AI extractor not configured, using OCR directly")

        run.context.check(COMPONENT)
        ocr = self._attempt_ocr(run, document)
        if ocr.success:
            return self._finalize_ocr(run, ocr, options)
        logger.error(f"[{COMPONENT}] Both AI and OCR extraction failed")
        return self._finalize_failed(run)

    # --------------------------------------------------------------- attempts

    def _attempt_ai(self, run: ExtractionRun, document: RawDocument) -> AIExtractionOutcome:
        start = time.perf_counter()
        outcome: Optional[AIExtractionOutcome] = None
        error: Optional[str] = None
        try:
            if not self.ai_available:
                error = "AI extractor is not configured"
                outcome = AIExtractionOutcome(success=False, error=error)
            else:
                outcome = call_external(
                    lambda timeout: self.ai_extractor.extract(document.buffer, document.mime_type, timeout),
                    context=run.context,
                    timeout=self.ai_call_timeout,
                    component="AIExtractor",
                    retry_on=(AIProviderError,),
                )
                error = outcome.error if not outcome.success else None
        except (ExtractionCancelledError, ExtractionTimeoutError) as e:
            error = e.message
            raise
        except ExtractionError as e:
            logger.error(f"[{COMPONENT}] AI extraction failed: {e}")
            error = str(e)
            outcome = AIExtractionOutcome(success=False, error=error)
        except Exception as e:
            logger.error(f"[{COMPONENT}] AI extractor crashed: {type(e).__name__}: {e}")
            error = f"{type(e).__name__}: {e}"
            outcome = AIExtractionOutcome(success=False, error=error)
        finally:
            run.log.append(ExtractionAttempt(
                method=ExtractionMethod.AI,
                success=outcome is not None and outcome.success,
                processing_time_ms=(time.perf_counter() - start) * 1000,
                parameter_count=len(outcome.health_parameters) if outcome else 0,
                error=error,
            ))
            run.advance(ExtractionState.AI_TRIED)
        return outcome

    def _attempt_ocr(self, run: ExtractionRun, document: RawDocument) -> OCRExtractionOutcome:
        start = time.perf_counter()
        outcome: Optional[OCRExtractionOutcome] = None
        error: Optional[str] = None
        try:
            outcome = self.ocr_method.extract(document, run.context)
            error = outcome.error
        except (ExtractionCancelledError, ExtractionTimeoutError) as e:
            error = e.message
            raise
        except Exception as e:
            logger.error(f"[{COMPONENT}] OCR method crashed: {type(e).__name__}: {e}")
            error = f"{type(e).__name__}: {e}"
            outcome = OCRExtractionOutcome(
                success=False, extracted_text=NO_TEXT_SENTINEL, is_scanned_document=True, error=error
            )
        finally:
            run.log.append(ExtractionAttempt(
                method=ExtractionMethod.OCR,
                success=outcome is not None and outcome.success,
                processing_time_ms=(time.perf_counter() - start) * 1000,
                parameter_count=len(outcome.health_parameters) if outcome else 0,
                error=error,
            ))
            run.advance(ExtractionState.OCR_TRIED)
        return outcome

    def _record_skipped_attempt(self, run: ExtractionRun, force_method: str, reason: str) -> None:
        """Forced method aborted before it ran: still one failed attempt."""
        method = ExtractionMethod.AI if force_method == "ai" else ExtractionMethod.OCR
        run.log.append(ExtractionAttempt(
            method=method,
            success=False,
            processing_time_ms=0.0,
            parameter_count=0,
            error=reason,
        ))
        run.advance(ExtractionState.AI_TRIED if method is ExtractionMethod.AI else ExtractionState.OCR_TRIED)

    # ----------------------------------------------------------- finalization

    def _finalize_ai(self, run: ExtractionRun, ai: AIExtractionOutcome, options: ExtractionOptions) -> ExtractionResult:
        logger.info(f"[{COMPONENT}] AI extraction successful: {len(ai.health_parameters)} parameters")
        return self._finalize(
            run,
            ExtractionMethod.AI,
            extracted_text=ai.extracted_text or NO_TEXT_SENTINEL,
            parameters=ai.health_parameters,
            insights=ai.ai_insights if options.include_insights else None,
            patient_info=ai.patient_info,
            is_scanned=False,
        )

    def _finalize_ocr(self, run: ExtractionRun, ocr: OCRExtractionOutcome, options: ExtractionOptions) -> ExtractionResult:
        insights = None
        if ocr.success and options.include_insights:
            insights = generate_basic_insights(ocr.health_parameters)
        logger.info(f"[{COMPONENT}] OCR finalized: {len(ocr.health_parameters)} parameters, success={ocr.success}")
        return self._finalize(
            run,
            ExtractionMethod.OCR,
            extracted_text=ocr.extracted_text,
            parameters=ocr.health_parameters,
            insights=insights,
            is_scanned=ocr.is_scanned_document,
        )

    def _finalize_failed(self, run: ExtractionRun) -> ExtractionResult:
        if run.log.error_summary is None:
            run.log.note_error("All extraction methods failed")
        return self._finalize(
            run,
            ExtractionMethod.FAILED,
            extracted_text=NO_TEXT_SENTINEL,
            parameters=(),
            is_scanned=True,
        )

    def _finalize(
        self,
        run: ExtractionRun,
        method: ExtractionMethod,
        *,
        extracted_text: str,
        parameters: Tuple[HealthParameter, ...],
        is_scanned: bool,
        insights: Optional[AIInsights] = None,
        patient_info: Optional[PatientInfo] = None
    ) -> ExtractionResult:
        total_ms = run.elapsed_ms()
        result = ExtractionResult(
            method=method,
            extracted_text=extracted_text,
            health_parameters=tuple(parameters),
            ai_insights=insights,
            patient_info=patient_info,
            is_scanned_document=is_scanned,
            extraction_log=ExtractionLog(
                attempts=run.log.attempts,
                final_method=method,
                total_time_ms=total_ms,
                error=run.log.error_summary,
            ),
        )
        run.advance(ExtractionState.FINALIZED)
        logger.info(
            f"[{COMPONENT}] Done: method={method.value}, {len(result.health_parameters)} parameters, "
            f"{len(result.extraction_log.attempts)} attempts, {total_ms:.0f}ms"
        )
        return result
