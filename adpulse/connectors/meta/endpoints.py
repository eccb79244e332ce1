"""ADPULSE — Meta API Endpoints.

Request builders for each Graph API call the fetcher makes. The query
parameters here are fixed by the upstream API and must not be reordered or
renamed.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from adpulse.config import settings

HOURLY_BREAKDOWN = "hourly_stats_aggregated_by_advertiser_time_zone"

# Default fields requested from Meta
INSIGHT_FIELDS = (
    "account_id",
    "account_currency",
    "campaign_id",
    "campaign_name",
    "adset_id",
    "adset_name",
    "ad_id",
    "ad_name",
    "objective",
    "impressions",
    "clicks",
    "spend",
    "actions",
    "action_values",
    "purchase_roas",
)

REPORT_STATUS_FIELDS = "async_status,async_percent_completion"
AD_STATUS_FIELD = "effective_status"
RESULTS_PAGE_LIMIT = 500


@dataclass(frozen=True)
class RequestDescriptor:
    """One logical Graph API request."""

    url: str
    method: str = "GET"
    params: Optional[Mapping[str, Any]] = None
    body: Optional[Mapping[str, Any]] = None

    def with_url(self, url: str) -> "RequestDescriptor":
        """Same method, pointed at ``url`` (a cursor link) with no extra params."""
        return RequestDescriptor(url=url, method=self.method)


def account_node(account_id: str) -> str:
    return f"act_{account_id}"


def build_insights_request(
    account_id: str,
    date: str,
    access_token: str,
    limit: int | None = None,
    base: str | None = None,
) -> RequestDescriptor:
    """POST /act_{id}/insights: creates an async ad-level hourly report."""
    base = base or settings.meta_base
    params: Dict[str, Any] = {
        "access_token": access_token,
        "level": "ad",
        "time_range": json.dumps({"since": date, "until": date}, separators=(",", ":")),
        "breakdowns": HOURLY_BREAKDOWN,
        "fields": ",".join(INSIGHT_FIELDS),
        "limit": str(limit or settings.page_limit),
    }
    return RequestDescriptor(
        url=f"{base}/{account_node(account_id)}/insights",
        method="POST",
        params=params,
    )


def build_report_status_request(
    report_id: str, access_token: str, base: str | None = None
) -> RequestDescriptor:
    """GET /{report_run_id}?fields=async_status,async_percent_completion"""
    base = base or settings.meta_base
    return RequestDescriptor(
        url=f"{base}/{report_id}",
        params={"fields": REPORT_STATUS_FIELDS, "access_token": access_token},
    )


def build_report_results_request(
    report_id: str, access_token: str, base: str | None = None
) -> RequestDescriptor:
    """GET /{report_run_id}/insights: first page of the finished report."""
    base = base or settings.meta_base
    return RequestDescriptor(
        url=f"{base}/{report_id}/insights",
        params={"access_token": access_token, "limit": str(RESULTS_PAGE_LIMIT)},
    )


def build_status_request(
    ad_ids: List[str], access_token: str, base: str | None = None
) -> RequestDescriptor:
    """GET /?ids=id1,id2,...&fields=effective_status"""
    base = base or settings.meta_base
    return RequestDescriptor(
        url=f"{base}/",
        params={
            "ids": ",".join(ad_ids),
            "fields": AD_STATUS_FIELD,
            "access_token": access_token,
        },
    )
