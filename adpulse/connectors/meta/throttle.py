"""ADPULSE — Rate-limit wait resolution from Meta usage headers.

Meta does not send ``Retry-After``. Instead two JSON headers describe usage:

- ``X-Business-Use-Case-Usage``: keyed by business/account id, each key maps
  to a list of usage entries; ``estimated_time_to_regain_access`` is minutes.
- ``X-FB-Ads-Insights-Throttle``: app/account utilization percentages.
  Informational only.
"""

import json
from typing import Any, Mapping

from adpulse.config import settings
from adpulse.core.logging import get_logger

logger = get_logger("meta.throttle")

BUC_USAGE_HEADER = "x-business-use-case-usage"
INSIGHTS_THROTTLE_HEADER = "x-fb-ads-insights-throttle"


def _regain_minutes(usage: Any) -> float | None:
    if not isinstance(usage, dict) or not usage:
        return None
    first = next(iter(usage.values()))
    if not isinstance(first, list) or not first:
        return None
    entry = first[0]
    if not isinstance(entry, dict):
        return None
    minutes = entry.get("estimated_time_to_regain_access")
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        return None
    return minutes if minutes > 0 else None


def resolve_wait_ms(
    headers: Mapping[str, str],
    default_ms: int | None = None,
) -> int:
    """Return how long to wait (ms) before retrying a rate-limited request.

    Falls back to ``default_ms`` (5 minutes unless configured otherwise) when
    the usage header is missing, not JSON, or carries no recovery estimate.
    """
    if default_ms is None:
        default_ms = settings.default_rate_limit_wait_ms

    log_insights_throttle(headers)

    raw = headers.get(BUC_USAGE_HEADER)
    if not raw:
        return default_ms
    try:
        minutes = _regain_minutes(json.loads(raw))
    except ValueError:
        logger.debug(f"Unparseable {BUC_USAGE_HEADER} header: {raw!r}")
        return default_ms
    if minutes is None:
        return default_ms
    return int(minutes * 60_000)


def log_insights_throttle(headers: Mapping[str, str]) -> None:
    """Log current Insights utilization. Never raises."""
    raw = headers.get(INSIGHTS_THROTTLE_HEADER)
    if not raw:
        return
    try:
        parsed = json.loads(raw)
        app_pct = parsed.get("app_id_util_pct")
        acc_pct = parsed.get("acc_id_util_pct")
    except (ValueError, AttributeError):
        logger.debug(f"Ignoring unparseable {INSIGHTS_THROTTLE_HEADER} header")
        return
    logger.warning(
        f"Insights throttle: app utilization: {app_pct}%, "
        f"account utilization: {acc_pct}%"
    )
