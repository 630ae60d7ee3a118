"""Exception hierarchy for the HEDERA client.

HederaError
├── AuthError            identity exchange failed (fatal, no retry)
├── TransportError       a single HTTP call failed (not retried)
├── ProtocolError        a success response was structurally invalid
└── OrchestrationError   the schedule lifecycle as a whole failed
    ├── CreationFailed
    ├── ScheduleRejected
    ├── TimedOut
    └── TransportFailure
"""

from __future__ import annotations

from typing import Optional


class HederaError(Exception):
    """Base exception for HEDERA client errors."""

    pass


class AuthError(HederaError):
    """Exception raised when the OAuth2 token exchange fails."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class TransportError(HederaError):
    """Exception raised when a single HTTP call fails.

    Example:
        >>> raise TransportError("GET /schedule/U1 returned 503", status=503)
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ProtocolError(HederaError):
    """Exception raised when a success response lacks an expected field."""

    pass


class OrchestrationError(HederaError):
    """The schedule lifecycle failed. Always carries the precipitating cause.

    ``cause`` is the underlying exception when there is one (transport or
    protocol failure); rejections and timeouts have no underlying exception.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        cause = self.cause
        seen: set[int] = set()
        while cause is not None and id(cause) not in seen:
            seen.add(id(cause))
            text = cause.message if isinstance(cause, OrchestrationError) else str(cause)
            parts.append(f"caused by {type(cause).__name__}: {text}")
            cause = getattr(cause, "cause", None) or cause.__cause__
        return "; ".join(parts)


class CreationFailed(OrchestrationError):
    """Schedule could not be created. Nothing exists remotely to clean up."""

    pass


class ScheduleRejected(OrchestrationError):
    """HEDERA declined the schedule."""

    def __init__(self, status_message: Optional[str]):
        super().__init__(
            f"Schedule was rejected by HEDERA, message={status_message!r}"
        )
        self.status_message = status_message


class TimedOut(OrchestrationError):
    """No terminal status was reached before the deadline."""

    def __init__(self, deadline: float):
        super().__init__(f"Schedule calculation timed out after {format_duration(deadline)}")
        self.deadline = deadline


class TransportFailure(OrchestrationError):
    """A transport or protocol error interrupted polling."""

    pass


def format_duration(seconds: float) -> str:
    """300 → '5m', 90 → '90s', 0.25 → '0.25s'."""
    if seconds >= 60 and seconds % 60 == 0:
        return f"{int(seconds // 60)}m"
    if float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{seconds:g}s"
