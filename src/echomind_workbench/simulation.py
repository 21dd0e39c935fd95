"""Dry-run execution seam: run, skip, stub, or heal side-effecting operations.

Every call to `SimulationRunner.simulate` is dispatched on the mode that is
active when the call starts:

- live: run the operation, retrying with exponential backoff, re-raise the
  last error once retries are exhausted.
- healing: same as live, but a final failure is logged and swallowed.
- dry: never run the operation; log that it would have run.
- preview: never run the operation; answer from the caller's stub.

Each attempt lands in a bounded, newest-first event log.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
import inspect
import itertools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from echomind_workbench.models import (
    PREVIEW_OUTCOMES,
    SIMULATION_MODES,
    EventStatus,
    PreviewOutcome,
    SimulatedEvent,
    SimulationMode,
    StubData,
    ToastMessage,
    ToastType,
)
from echomind_workbench.notifications import ToastQueue

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]

LOGGER = logging.getLogger("echomind_workbench.simulation")

MAX_EVENTS = 100
OPERATION_PREVIEW_CHARS = 200
DEFAULT_BASE_DELAY_SECONDS = 0.15
NOT_EXECUTED_RESULT = "Operation was not executed."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
STUB_REQUIRED_MESSAGE = "Preview mode requires a 'stub' to be provided."
HEALED_PREFIX = "HEALED: "


class SimulationError(Exception):
    """Runner-level failure with user-facing message text."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StubRequiredError(SimulationError):
    """Raised when preview mode is asked to run without a stub."""


def describe_operation(operation: Callable[..., object]) -> str:
    """Return a short textual description of an operation for the event log."""
    try:
        text = inspect.getsource(operation).strip()
    except (OSError, TypeError):
        text = repr(operation)
    if len(text) > OPERATION_PREVIEW_CHARS:
        return f"{text[:OPERATION_PREVIEW_CHARS]}..."
    return text


def error_message(error: BaseException) -> str:
    return str(error) or UNKNOWN_ERROR_MESSAGE


@dataclass(frozen=True)
class _Invocation:
    label: str
    mode: SimulationMode
    operation: str
    stub: StubData[Any] | None


class SimulationRunner:
    """Session-wide simulation state: mode, preview outcome, events, and toasts."""

    def __init__(
        self,
        *,
        mode: SimulationMode = "dry",
        preview_outcome: PreviewOutcome = "success",
        base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS,
        toasts: ToastQueue | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        max_events: int = MAX_EVENTS,
    ) -> None:
        _require_mode(mode)
        _require_preview_outcome(preview_outcome)
        self._mode: SimulationMode = mode
        self._preview_outcome: PreviewOutcome = preview_outcome
        self.base_delay_seconds = base_delay_seconds
        self.toasts = toasts if toasts is not None else ToastQueue()
        self._sleep = sleep
        self._event_ids = itertools.count(0)
        self._events: deque[SimulatedEvent] = deque(maxlen=max_events)
        self._handlers = {
            "preview": self._run_preview,
            "dry": self._run_dry,
            "live": self._run_live,
            "healing": self._run_healing,
        }

    @property
    def mode(self) -> SimulationMode:
        return self._mode

    @property
    def preview_outcome(self) -> PreviewOutcome:
        return self._preview_outcome

    @property
    def events(self) -> list[SimulatedEvent]:
        """Logged events, newest first."""
        return list(self._events)

    def set_mode(self, new_mode: SimulationMode) -> None:
        """Switch modes; any transition is allowed and announced with a toast."""
        _require_mode(new_mode)
        self._mode = new_mode
        LOGGER.info("simulation_mode mode=%s", new_mode)
        self.add_toast("info", "Mode Switched", f"Environment is now in {new_mode.upper()} mode.")

    def set_preview_outcome(self, outcome: PreviewOutcome) -> None:
        _require_preview_outcome(outcome)
        self._preview_outcome = outcome

    def clear_events(self) -> None:
        """Drop logged events. Event ids keep counting from where they were."""
        self._events.clear()

    def add_toast(self, toast_type: ToastType, title: str, message: str) -> ToastMessage:
        return self.toasts.add(toast_type, title, message)

    def dismiss_toast(self, toast_id: int) -> bool:
        return self.toasts.dismiss(toast_id)

    async def simulate(
        self,
        label: str,
        operation: Operation[T],
        *,
        retries: int = 0,
        stub: StubData[T] | None = None,
    ) -> T | None:
        """Run `operation` under the current mode and log every attempt.

        Returns the operation result (live/healing), the stub success value
        (preview), or None (dry, and healing after a suppressed failure).
        """
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            raise ValueError("retries must be a non-negative integer")
        invocation = _Invocation(
            label=label,
            mode=self._mode,
            operation=describe_operation(operation),
            stub=stub,
        )
        handler = self._handlers[invocation.mode]
        return await handler(invocation, operation, retries)

    def _record(
        self,
        invocation: _Invocation,
        *,
        status: EventStatus,
        attempts: int,
        result: Any = None,
        error: str | None = None,
    ) -> SimulatedEvent:
        # No await between id assignment and insertion keeps appends atomic on the loop.
        event = SimulatedEvent(
            id=next(self._event_ids),
            label=invocation.label,
            mode=invocation.mode,
            status=status,
            operation=invocation.operation,
            attempts=attempts,
            result=result,
            error=error,
            stub=invocation.stub,
        )
        self._events.appendleft(event)
        LOGGER.debug(
            "simulated_event id=%d label=%s mode=%s status=%s attempts=%d",
            event.id,
            event.label,
            event.mode,
            event.status,
            event.attempts,
        )
        return event

    async def _run_preview(self, invocation: _Invocation, operation: Operation[T], retries: int) -> T | None:
        del operation, retries
        stub = invocation.stub
        if stub is None:
            self._record(invocation, status="failure", attempts=1, error=STUB_REQUIRED_MESSAGE)
            self.add_toast("error", "Preview Error", STUB_REQUIRED_MESSAGE)
            raise StubRequiredError(STUB_REQUIRED_MESSAGE)
        if self._preview_outcome == "success":
            self._record(invocation, status="previewed", attempts=1, result=stub.success)
            return stub.success
        self._record(invocation, status="previewed", attempts=1, error=error_message(stub.failure))
        raise stub.failure

    async def _run_dry(self, invocation: _Invocation, operation: Operation[T], retries: int) -> T | None:
        del operation, retries
        self._record(invocation, status="simulated", attempts=1, result=NOT_EXECUTED_RESULT)
        return None

    async def _run_live(self, invocation: _Invocation, operation: Operation[T], retries: int) -> T | None:
        return await self._run_with_retries(invocation, operation, retries, heal=False)

    async def _run_healing(self, invocation: _Invocation, operation: Operation[T], retries: int) -> T | None:
        return await self._run_with_retries(invocation, operation, retries, heal=True)

    async def _run_with_retries(
        self,
        invocation: _Invocation,
        operation: Operation[T],
        retries: int,
        *,
        heal: bool,
    ) -> T | None:
        for attempt_index in range(retries + 1):
            attempts = attempt_index + 1
            try:
                result = await operation()
            except Exception as exc:
                message = error_message(exc)
                if attempt_index < retries:
                    self._record(invocation, status="retrying", attempts=attempts, error=message)
                    await self._sleep(self.backoff_delay(attempt_index))
                    continue
                if heal:
                    LOGGER.warning(
                        "healing_mode suppressed final failure label=%s attempts=%d error=%s",
                        invocation.label,
                        attempts,
                        message,
                    )
                    self._record(
                        invocation,
                        status="failure",
                        attempts=attempts,
                        error=f"{HEALED_PREFIX}{message}",
                    )
                    return None
                self._record(invocation, status="failure", attempts=attempts, error=message)
                raise
            self._record(invocation, status="success", attempts=attempts, result=result)
            return result
        raise SimulationError("Simulation loop finished unexpectedly.")

    def backoff_delay(self, attempt_index: int) -> float:
        """Delay before the attempt after `attempt_index` (0-based); doubles each time."""
        return self.base_delay_seconds * (2**attempt_index)


def _require_mode(mode: str) -> None:
    if mode not in SIMULATION_MODES:
        supported = ", ".join(SIMULATION_MODES)
        raise ValueError(f"Unsupported simulation mode: {mode!r}; supported modes: {supported}")


def _require_preview_outcome(outcome: str) -> None:
    if outcome not in PREVIEW_OUTCOMES:
        raise ValueError(f"Unsupported preview outcome: {outcome!r}")
