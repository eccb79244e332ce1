from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from adpulse.connectors.meta.client import MetaClient

GRAPH = "https://graph.facebook.com/v21.0"
ACCOUNT_ID = "123456"
TOKEN = "test-token"


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock):
    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> MetaClient:
        kwargs.setdefault("max_retries", 3)
        kwargs.setdefault("backoff_cap", 60.0)
        return MetaClient(
            TOKEN,
            ACCOUNT_ID,
            transport=httpx.MockTransport(handler),
            sleep=clock.sleep,
            clock=clock.time,
            jitter=lambda: 0.5,
            **kwargs,
        )

    return _make


def graph_error(code: int, message: str = "error", subcode: int | None = None) -> dict:
    error = {"code": code, "message": message, "type": "OAuthException"}
    if subcode is not None:
        error["error_subcode"] = subcode
    return {"error": error}


def insight_row(ad_id: str, hour: str = "08:00:00 - 08:59:59", **overrides) -> dict:
    row = {
        "account_id": ACCOUNT_ID,
        "account_currency": "USD",
        "campaign_id": "camp_1",
        "campaign_name": "Test Campaign",
        "adset_id": "adset_1",
        "adset_name": "Test Ad Set",
        "ad_id": ad_id,
        "ad_name": f"Ad {ad_id}",
        "objective": "OUTCOME_SALES",
        "impressions": "1500",
        "clicks": "42",
        "spend": "12.34",
        "date_start": "2025-01-15",
        "date_stop": "2025-01-15",
        "hourly_stats_aggregated_by_advertiser_time_zone": hour,
    }
    row.update(overrides)
    return row
