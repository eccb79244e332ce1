"""ADPULSE — Error kinds and exceptions.

Every failed attempt against the Graph API is classified into exactly one
``ErrorKind``. The kinds are plain frozen dataclasses so callers can branch
on them with ``isinstance`` over the closed union instead of relying on
exception subclass order.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from adpulse.connectors.meta.reports import ReportJob


# ─────────────────────────────────────────────
# ERROR KINDS
# ─────────────────────────────────────────────


@dataclass(frozen=True)
class Auth:
    """Invalid/expired token or missing permission. Never retried."""

    code: Optional[int]
    subcode: Optional[int]
    message: str

    retryable = False


@dataclass(frozen=True)
class RateLimit:
    """Meta throttling (HTTP 400 + throttle code). Retried after ``wait_ms``."""

    code: Optional[int]
    subcode: Optional[int]
    message: str
    wait_ms: int

    retryable = True


@dataclass(frozen=True)
class ServerTransient:
    """5xx without a parseable error envelope."""

    status: int

    retryable = True


@dataclass(frozen=True)
class NetworkTransient:
    """Connection reset, timeout or any failure before a response arrived."""

    message: str

    retryable = True


@dataclass(frozen=True)
class ApiError:
    """Semantically rejected request (e.g. code 1, "reduce the amount of data")."""

    code: Optional[int]
    subcode: Optional[int]
    message: str

    retryable = False


@dataclass(frozen=True)
class HttpError:
    """Non-success HTTP status with no Meta error envelope."""

    status: int
    body: Any

    retryable = False


ErrorKind = Union[Auth, RateLimit, ServerTransient, NetworkTransient, ApiError, HttpError]


def describe_kind(kind: ErrorKind) -> str:
    """Human-readable one-liner for an error kind."""
    if isinstance(kind, (Auth, RateLimit, ApiError)):
        subcode = kind.subcode if kind.subcode is not None else "none"
        return f"{type(kind).__name__} (code {kind.code}, subcode {subcode}): {kind.message}"
    if isinstance(kind, ServerTransient):
        return f"Server error {kind.status} (non-JSON body)"
    if isinstance(kind, NetworkTransient):
        return f"Network error: {kind.message}"
    return f"HTTP error {kind.status}: {kind.body}"


# ─────────────────────────────────────────────
# EXCEPTIONS
# ─────────────────────────────────────────────


class FetchError(Exception):
    """Base class for every failure surfaced by a fetch run."""


class ValidationError(FetchError):
    """Malformed caller input (bad date, bad account id)."""


class MetaAPIError(FetchError):
    """Raised when a Graph API request fails with a classified error kind."""

    def __init__(
        self,
        kind: ErrorKind,
        attempts: int = 1,
        retries_exhausted: bool = False,
        message: str | None = None,
    ):
        self.kind = kind
        self.attempts = attempts
        self.retries_exhausted = retries_exhausted
        if message is None:
            message = describe_kind(kind)
            if retries_exhausted:
                message = f"Failed after {attempts} retries. Last error: {message}"
        super().__init__(message)


class ReportJobError(MetaAPIError):
    """The async insights report ended in ``Job Failed`` or ``Job Skipped``."""

    def __init__(self, job: "ReportJob"):
        self.job = job
        message = f"Insights report failed with status: {job.async_status}"
        super().__init__(
            ApiError(code=None, subcode=None, message=message), message=message
        )


class ReportTimeoutError(FetchError):
    """The async insights report did not finish within the poll timeout."""

    def __init__(self, job: "ReportJob", timeout_seconds: float):
        self.job = job
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Insights report timed out after {timeout_seconds:g}s "
            f"(status: {job.async_status}, {job.percent_complete}%)"
        )


class DeadlineExceededError(FetchError):
    """The run reached the configured overall deadline, or a timed wait would pass it."""

    def __init__(self, deadline_seconds: float, wait_seconds: Optional[float] = None):
        self.deadline_seconds = deadline_seconds
        self.wait_seconds = wait_seconds
        message = f"Overall deadline of {deadline_seconds:g}s exceeded"
        if wait_seconds is not None:
            message += f" (next wait would be {wait_seconds:.1f}s)"
        super().__init__(message)
