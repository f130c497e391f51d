"""
Request-scoped execution primitives.

- CancellationToken: caller-owned abort flag
- Deadline: whole-request time budget
- ExtractionContext: both of the above, passed to every stage
- call_external(): one external call with timeout clipping and retry (tenacity)
- fan_out(): bounded-concurrency fan-out with cancellation-aware fan-in
"""

import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from loguru import logger
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config.settings import (
    EXTERNAL_CALL_RETRIES,
    FAN_OUT_POLL_SECONDS,
    OCR_MAX_WORKERS,
    RETRY_BACKOFF_MAX_SECONDS,
    RETRY_BACKOFF_MIN_SECONDS,
)
from ..domain.exceptions import ExtractionCancelledError, ExtractionTimeoutError

T = TypeVar("T")


class CancellationToken:
    """Thread-safe abort flag shared between the caller and one extraction call."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = "cancelled by caller"

    def cancel(self, reason: Optional[str] = None) -> None:
        if reason:
            self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason


class Deadline:
    """Monotonic deadline; ``None`` seconds means unbounded."""

    def __init__(self, seconds: Optional[float]) -> None:
        self._expires_at = time.monotonic() + seconds if seconds else None

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return self._expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0


@dataclass(frozen=True)
class ExtractionContext:
    """Deadline + cancellation for one extraction call."""

    deadline: Deadline = field(default_factory=lambda: Deadline(None))
    cancel_token: CancellationToken = field(default_factory=CancellationToken)

    @classmethod
    def create(
        cls,
        timeout_seconds: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> "ExtractionContext":
        return cls(
            deadline=Deadline(timeout_seconds),
            cancel_token=cancel_token or CancellationToken(),
        )

    def check(self, component: str) -> None:
        """Raises if the request was cancelled or ran out of time."""
        if self.cancel_token.cancelled:
            raise ExtractionCancelledError(self.cancel_token.reason, component=component)
        if self.deadline.expired:
            raise ExtractionTimeoutError("request deadline exceeded", component=component)

    def clip_timeout(self, timeout: float, component: str) -> float:
        """Per-call timeout, never beyond the request deadline."""
        remaining = self.deadline.remaining()
        if remaining is None:
            return timeout
        if remaining <= 0:
            raise ExtractionTimeoutError("request deadline exceeded", component=component)
        return min(timeout, remaining)


def call_external(
    fn: Callable[[float], T],
    *,
    context: ExtractionContext,
    timeout: float,
    component: str,
    retry_on: Tuple[Type[BaseException], ...],
    retries: int = EXTERNAL_CALL_RETRIES
) -> T:
    """
    Runs one blocking external call.

    ``fn`` receives the effective timeout in seconds. Exceptions listed in
    ``retry_on`` are retried ``retries`` times with exponential backoff; all
    others propagate immediately.
    """

    def _attempt() -> T:
        context.check(component)
        return fn(context.clip_timeout(timeout, component))

    retrying = Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(
            multiplier=RETRY_BACKOFF_MIN_SECONDS,
            min=RETRY_BACKOFF_MIN_SECONDS,
            max=RETRY_BACKOFF_MAX_SECONDS,
        ),
        retry=retry_if_exception_type(retry_on),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"[{component}] Retry attempt {retry_state.attempt_number} failed "
            f"({retry_state.outcome.exception()}), retrying in "
            f"{retry_state.next_action.sleep:.1f}s"
        ),
    )
    return retrying(_attempt)


@dataclass(frozen=True)
class BranchOutcome(Generic[T]):
    """Result of one fan-out branch: a value or the error it raised."""

    index: int
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    branches: Sequence[Callable[[], T]],
    *,
    context: ExtractionContext,
    component: str,
    max_workers: Optional[int] = None
) -> List[BranchOutcome[T]]:
    """
    Runs independent branches on a bounded pool and waits for all of them.

    Branch errors are returned, not raised, except cancellation and deadline
    errors which abort the whole fan-out. On abort, pending branches are
    cancelled and the pool is not joined.
    """
    if not branches:
        return []

    context.check(component)
    workers = max(1, min(len(branches), max_workers or OCR_MAX_WORKERS))
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="medextract")
    futures = [executor.submit(branch) for branch in branches]
    logger.debug(f"[{component}] Fan-out: {len(branches)} branches on {workers} workers")

    aborted = True
    try:
        pending = set(futures)
        while pending:
            context.check(component)
            poll = FAN_OUT_POLL_SECONDS
            remaining = context.deadline.remaining()
            if remaining is not None:
                poll = max(0.0, min(poll, remaining))
            _, pending = wait(pending, timeout=poll, return_when=FIRST_COMPLETED)
        aborted = False
    finally:
        if aborted:
            logger.warning(f"[{component}] Fan-out aborted, cancelling pending branches")
        executor.shutdown(wait=not aborted, cancel_futures=aborted)

    outcomes: List[BranchOutcome[T]] = []
    for index, future in enumerate(futures):
        error = future.exception()
        if isinstance(error, (ExtractionCancelledError, ExtractionTimeoutError)):
            raise error
        if error is not None:
            outcomes.append(BranchOutcome(index=index, error=error))
        else:
            outcomes.append(BranchOutcome(index=index, value=future.result()))
    return outcomes
