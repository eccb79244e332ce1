"""ADPULSE — Meta Raw → Normalized Transformer.

Converts raw Meta insight rows into ``AdHourlyRecord``s.

``purchase_roas`` and ``purchase_value`` target purchase conversions only
(omni_purchase, then purchase). Advertisers tracking leads or registrations
still find those in ``actions``, which keeps every action type.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Union

from adpulse.connectors.meta.endpoints import HOURLY_BREAKDOWN
from adpulse.core.logging import get_logger
from adpulse.models.normalized_models import ActionEntry, AdHourlyRecord

logger = get_logger("meta.transformer")

OMNI_PURCHASE = "omni_purchase"
PURCHASE = "purchase"

Number = Union[int, float]


def _safe_float(value: Any, field: str, ad_id: str = "") -> float:
    """Convert a numeric string to float; malformed input becomes 0.0."""
    if value is None or value == "":
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = math.nan
    if not math.isfinite(parsed):
        logger.warning(f"Malformed {field}={value!r} for ad {ad_id}; using 0")
        return 0.0
    return parsed


def _safe_int(value: Any, field: str, ad_id: str = "") -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(_safe_float(value, field, ad_id))


def _number(value: Any, field: str, ad_id: str = "") -> Number:
    """Action counts: keep integers as int, fractional values as float."""
    as_float = _safe_float(value, field, ad_id)
    return int(as_float) if as_float.is_integer() else as_float


def _optional_float(value: Any, field: str, ad_id: str = "") -> Optional[float]:
    if value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = math.nan
    if not math.isfinite(parsed):
        logger.warning(f"Malformed {field}={value!r} for ad {ad_id}; using null")
        return None
    return parsed


def _first_value(entries: Optional[Sequence[Dict[str, Any]]], action_type: str) -> Any:
    for entry in entries or []:
        if entry.get("action_type") == action_type:
            return entry.get("value")
    return None


def extract_purchase_roas(row: Dict[str, Any]) -> Optional[float]:
    """omni_purchase ROAS, else the first ROAS entry, else None."""
    entries = row.get("purchase_roas") or []
    if not entries:
        return None
    value = _first_value(entries, OMNI_PURCHASE)
    if value is None:
        value = entries[0].get("value")
    return _optional_float(value, "purchase_roas", row.get("ad_id", ""))


def extract_purchase_value(row: Dict[str, Any]) -> Optional[float]:
    """omni_purchase value, else purchase value, else None."""
    entries = row.get("action_values")
    value = _first_value(entries, OMNI_PURCHASE)
    if value is None:
        value = _first_value(entries, PURCHASE)
    return _optional_float(value, "purchase_value", row.get("ad_id", ""))


def extract_actions(row: Dict[str, Any]) -> List[ActionEntry]:
    ad_id = row.get("ad_id", "")
    return [
        ActionEntry(
            type=a.get("action_type", ""),
            count=_number(a.get("value"), f"actions[{a.get('action_type')}]", ad_id),
        )
        for a in row.get("actions") or []
    ]


def normalize_row(row: Dict[str, Any], status: str) -> AdHourlyRecord:
    """Transform one raw insight row plus its ad status into a clean record."""
    ad_id = row.get("ad_id", "")
    return AdHourlyRecord(
        account_id=row.get("account_id", ""),
        date=row.get("date_start", ""),
        hour=row.get(HOURLY_BREAKDOWN, ""),
        campaign_id=row.get("campaign_id", ""),
        campaign_name=row.get("campaign_name", ""),
        adset_id=row.get("adset_id", ""),
        adset_name=row.get("adset_name", ""),
        ad_id=ad_id,
        ad_name=row.get("ad_name", ""),
        currency=row.get("account_currency", ""),
        status=status,
        objective=row.get("objective", ""),
        impressions=_safe_int(row.get("impressions"), "impressions", ad_id),
        clicks=_safe_int(row.get("clicks"), "clicks", ad_id),
        spend=_safe_float(row.get("spend"), "spend", ad_id),
        purchase_roas=extract_purchase_roas(row),
        purchase_value=extract_purchase_value(row),
        actions=extract_actions(row),
    )


def transform_insights(
    raw_data: List[Dict[str, Any]],
    status_map: Dict[str, str],
    unknown_status: str,
) -> List[AdHourlyRecord]:
    """Normalize every row, defaulting missing statuses to ``unknown_status``."""
    records = [
        normalize_row(row, status_map.get(row.get("ad_id", ""), unknown_status))
        for row in raw_data
    ]
    logger.info(f"Normalized {len(records)} hourly rows")
    return records
