"""Tests for request execution primitives (deadline, cancellation, retry, fan-out)."""

import threading
import time

import pytest

from medextract.extraction.domain.exceptions import (
    ExtractionCancelledError,
    ExtractionTimeoutError,
    OCRProviderError,
    OCRTimeoutError,
)
from medextract.extraction.infrastructure.execution import (
    CancellationToken,
    Deadline,
    ExtractionContext,
    call_external,
    fan_out,
)


class TestContext:

    def test_unbounded_deadline_never_expires(self):
        deadline = Deadline(None)
        assert deadline.remaining() is None
        assert not deadline.expired

    def test_check_raises_after_cancel(self):
        token = CancellationToken()
        context = ExtractionContext.create(cancel_token=token)
        context.check("test")

        token.cancel("user closed the page")

        with pytest.raises(ExtractionCancelledError, match="user closed the page"):
            context.check("test")

    def test_check_raises_after_deadline(self):
        context = ExtractionContext.create(timeout_seconds=0.01)
        time.sleep(0.02)

        with pytest.raises(ExtractionTimeoutError):
            context.check("test")

    def test_clip_timeout_never_exceeds_remaining_budget(self):
        context = ExtractionContext.create(timeout_seconds=5)
        assert context.clip_timeout(60, "test") <= 5

    def test_clip_timeout_keeps_shorter_call_timeout(self):
        context = ExtractionContext.create(timeout_seconds=100)
        assert context.clip_timeout(3, "test") == 3


class TestCallExternal:

    def test_passes_effective_timeout(self):
        received = []
        context = ExtractionContext.create(timeout_seconds=2)

        call_external(received.append, context=context, timeout=30, component="test", retry_on=())

        assert 0 < received[0] <= 2

    def test_transient_error_is_retried_once(self):
        calls = []

        def flaky(timeout):
            calls.append(timeout)
            if len(calls) == 1:
                raise OCRTimeoutError("slow")
            return "ok"

        result = call_external(
            flaky, context=ExtractionContext.create(), timeout=1, component="test", retry_on=(OCRTimeoutError,)
        )

        assert result == "ok"
        assert len(calls) == 2

    def test_retries_are_bounded(self):
        calls = []

        def always_slow(timeout):
            calls.append(timeout)
            raise OCRTimeoutError("slow")

        with pytest.raises(OCRTimeoutError):
            call_external(
                always_slow, context=ExtractionContext.create(), timeout=1, component="test",
                retry_on=(OCRTimeoutError,), retries=1,
            )
        assert len(calls) == 2

    def test_other_errors_are_not_retried(self):
        calls = []

        def broken(timeout):
            calls.append(timeout)
            raise OCRProviderError("no binary")

        with pytest.raises(OCRProviderError):
            call_external(
                broken, context=ExtractionContext.create(), timeout=1, component="test", retry_on=(OCRTimeoutError,)
            )
        assert len(calls) == 1

    def test_cancelled_request_makes_no_call(self):
        token = CancellationToken()
        token.cancel()
        calls = []

        with pytest.raises(ExtractionCancelledError):
            call_external(
                calls.append, context=ExtractionContext.create(cancel_token=token), timeout=1,
                component="test", retry_on=(),
            )
        assert calls == []


class TestFanOut:

    def test_results_in_branch_order(self):
        def slow(value, delay):
            time.sleep(delay)
            return value

        branches = [lambda: slow("a", 0.05), lambda: slow("b", 0.0), lambda: slow("c", 0.02)]
        outcomes = fan_out(branches, context=ExtractionContext.create(), component="test", max_workers=3)

        assert [o.value for o in outcomes] == ["a", "b", "c"]

    def test_branch_error_is_returned(self):
        def broken():
            raise ValueError("bad branch")

        outcomes = fan_out([lambda: 1, broken], context=ExtractionContext.create(), component="test")

        assert outcomes[0].ok and outcomes[0].value == 1
        assert not outcomes[1].ok and isinstance(outcomes[1].error, ValueError)

    def test_empty_fan_out(self):
        assert fan_out([], context=ExtractionContext.create(), component="test") == []

    def test_cancellation_aborts_waiting(self):
        token = CancellationToken()
        release = threading.Event()

        def blocked():
            release.wait(5)
            return "late"

        threading.Timer(0.1, token.cancel).start()
        start = time.monotonic()
        try:
            with pytest.raises(ExtractionCancelledError):
                fan_out([blocked], context=ExtractionContext.create(cancel_token=token), component="test")
        finally:
            release.set()

        assert time.monotonic() - start < 2

    def test_deadline_aborts_waiting(self):
        release = threading.Event()

        def blocked():
            release.wait(5)

        try:
            with pytest.raises(ExtractionTimeoutError):
                fan_out([blocked], context=ExtractionContext.create(timeout_seconds=0.2), component="test")
        finally:
            release.set()

    def test_cancellation_raised_inside_branch_propagates(self):
        def cancelled():
            raise ExtractionCancelledError("stop")

        with pytest.raises(ExtractionCancelledError):
            fan_out([cancelled, lambda: 1], context=ExtractionContext.create(), component="test")
