"""ADPULSE — Graph API response classification.

Maps one HTTP response (status + parsed body + headers) to at most one
``ErrorKind``. ``None`` means the response is a success and the body should
be returned to the caller as-is.

Precedence, first match wins:
  1. error code in the auth set         → Auth (even on HTTP 5xx)
  2. error code in the rate-limit set   → RateLimit
  3. HTTP 5xx with an error envelope    → ApiError (fatal)
  4. HTTP 5xx with no parseable body    → ServerTransient
  5. any other error envelope           → ApiError
  6. non-2xx status                     → HttpError
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional

from adpulse.config import Settings, settings
from adpulse.connectors.meta.throttle import resolve_wait_ms
from adpulse.core.errors import (
    ApiError,
    Auth,
    ErrorKind,
    HttpError,
    RateLimit,
    ServerTransient,
)

# Sentinel for "body missing or not JSON", distinct from a JSON ``null``.
UNPARSEABLE = object()


@dataclass(frozen=True)
class ClassifierConfig:
    """Error-code sets and fallback wait used to classify responses."""

    auth_codes: FrozenSet[int] = field(default_factory=lambda: frozenset({190, 10, 200}))
    rate_limit_codes: FrozenSet[int] = field(
        default_factory=lambda: frozenset({4, 17, 613, 80000, 80003, 80004, 80014})
    )
    default_wait_ms: int = 5 * 60 * 1000

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> "ClassifierConfig":
        return cls(
            auth_codes=frozenset(cfg.auth_error_codes),
            rate_limit_codes=frozenset(cfg.rate_limit_error_codes),
            default_wait_ms=cfg.default_rate_limit_wait_ms,
        )


def error_envelope(body: Any) -> Optional[Mapping[str, Any]]:
    """Return the ``error`` object of a Graph API body, if there is one."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error
    if error:
        return {"message": str(error)}
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def classify_response(
    status_code: int,
    body: Any,
    headers: Mapping[str, str],
    config: ClassifierConfig,
) -> Optional[ErrorKind]:
    """Classify a response; ``body`` is ``UNPARSEABLE`` when it was not JSON."""
    error = error_envelope(body)

    if error is not None:
        code = _as_int(error.get("code"))
        subcode = _as_int(error.get("error_subcode"))

        if code is not None and code in config.auth_codes:
            return Auth(code, subcode, error.get("message") or "Authentication failed")

        if code is not None and code in config.rate_limit_codes:
            return RateLimit(
                code,
                subcode,
                error.get("message") or "Rate limited",
                wait_ms=resolve_wait_ms(headers, config.default_wait_ms),
            )

        if status_code >= 500:
            return ApiError(
                code, subcode, error.get("message") or f"Server error {status_code}"
            )

        return ApiError(
            code, subcode, error.get("message") or "Unknown Facebook API error"
        )

    if body is UNPARSEABLE:
        if status_code >= 500:
            return ServerTransient(status_code)
        return HttpError(status_code, "non-JSON response")

    if not 200 <= status_code < 300:
        return HttpError(status_code, body)

    return None
