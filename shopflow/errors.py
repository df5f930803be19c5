from __future__ import annotations

from enum import Enum


class FaultKind(str, Enum):
    """Backend-neutral tags for driver failures. The executor branches on these only."""

    NOT_FOUND = "not_found"
    STALE = "stale"
    NOT_INTERACTABLE = "not_interactable"
    CLICK_INTERCEPTED = "click_intercepted"
    SESSION_CLOSED = "session_closed"
    UNKNOWN = "unknown"


TRANSIENT_FAULTS: frozenset[FaultKind] = frozenset(
    {
        FaultKind.NOT_FOUND,
        FaultKind.STALE,
        FaultKind.NOT_INTERACTABLE,
        FaultKind.CLICK_INTERCEPTED,
    }
)


class FlowError(RuntimeError):
    def __init__(self, reason_code: str, message: str) -> None:
        super().__init__(message)
        self.reason_code = reason_code


class DriverFault(FlowError):
    """Raised by driver backends; `kind` decides retry vs abort."""

    def __init__(self, kind: FaultKind, message: str = "") -> None:
        super().__init__(kind.value, message or kind.value)
        self.kind = kind


class ActionTimeoutError(FlowError):
    def __init__(self, target: str, elapsed_s: float, attempts: int, last_reason: str = "") -> None:
        super().__init__(
            "timeout",
            f"Timed out after {elapsed_s:.2f}s ({attempts} attempt(s)) waiting on {target}"
            + (f": {last_reason}" if last_reason else ""),
        )
        self.target = target
        self.elapsed_s = elapsed_s
        self.attempts = attempts
        self.last_reason = last_reason


class ActionFailedError(FlowError):
    def __init__(self, target: str, reason: str) -> None:
        super().__init__("fatal", f"Action on {target} failed: {reason}")
        self.target = target
        self.reason = reason


class IllegalTransitionError(FlowError):
    def __init__(self, state: str, operation: str, detail: str = "") -> None:
        message = f"'{operation}' is not a legal operation from {state}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__("illegal_transition", message)
        self.state = state
        self.operation = operation


class UnsupportedConfigError(FlowError):
    def __init__(self, message: str) -> None:
        super().__init__("unsupported_config", message)
