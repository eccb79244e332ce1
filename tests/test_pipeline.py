from __future__ import annotations

import json

import httpx
import pytest

from adpulse.analyzer.pipeline import fetch_ad_data
from adpulse.connectors.meta.reports import InsightsReport
from adpulse.core.errors import Auth, DeadlineExceededError, MetaAPIError
from adpulse.storage import output_path, save_output

from conftest import ACCOUNT_ID, graph_error, insight_row

ROWS_PAGE_1 = [
    insight_row(
        "ad_1",
        hour="08:00:00 - 08:59:59",
        spend="12.345",
        purchase_roas=[{"action_type": "omni_purchase", "value": "3.52"}],
    ),
    insight_row("ad_1", hour="09:00:00 - 09:59:59", spend="7.655"),
]
ROWS_PAGE_2 = [
    insight_row("ad_2", campaign_id="camp_2", adset_id="adset_2", impressions="10", clicks="0", spend="0.5"),
    insight_row("ad_3", impressions="1", clicks="1", spend="0"),
]


def graph_api(statuses: dict, poll_statuses=("Job Running", "Job Completed")):
    polls = list(poll_statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST":
            return httpx.Response(200, json={"report_run_id": "rep_9"})
        if path == "/v21.0/rep_9":
            status = polls.pop(0) if len(polls) > 1 else polls[0]
            return httpx.Response(200, json={"id": "rep_9", "async_status": status, "async_percent_completion": 50})
        if path == "/v21.0/rep_9/insights":
            if request.url.params.get("after") == "p2":
                return httpx.Response(200, json={"data": ROWS_PAGE_2, "paging": {"cursors": {}}})
            return httpx.Response(
                200,
                json={
                    "data": ROWS_PAGE_1,
                    "paging": {"next": "https://graph.facebook.com/v21.0/rep_9/insights?after=p2"},
                },
            )
        if path == "/v21.0/":
            ids = request.url.params["ids"].split(",")
            return httpx.Response(
                200, json={i: {"id": i, "effective_status": statuses[i]} for i in ids if i in statuses}
            )
        return httpx.Response(404, json=graph_error(803, "unknown"))

    return handler


@pytest.mark.asyncio
async def test_fetch_ad_data_builds_output_file(make_client) -> None:
    client = make_client(graph_api({"ad_1": "ACTIVE", "ad_2": "PAUSED"}))

    output = await fetch_ad_data(client, "2025-01-15")

    meta = output.metadata
    assert meta.account_id == ACCOUNT_ID
    assert meta.date == "2025-01-15"
    assert meta.platform == "facebook"
    assert meta.total_records == 4
    assert meta.fetched_at

    assert [r.ad_id for r in output.data] == ["ad_1", "ad_1", "ad_2", "ad_3"]
    assert [r.status for r in output.data] == ["ACTIVE", "ACTIVE", "PAUSED", "UNKNOWN"]
    assert output.data[0].purchase_roas == 3.52
    assert output.data[1].purchase_roas is None

    s = meta.summary
    assert s.total_spend == 20.5
    assert s.total_impressions == 1500 + 1500 + 10 + 1
    assert s.total_clicks == 42 + 42 + 0 + 1
    assert s.unique_ads == 3
    assert s.unique_campaigns == 2
    assert s.unique_adsets == 2


@pytest.mark.asyncio
async def test_fatal_error_fails_whole_run(make_client) -> None:
    client = make_client(lambda request: httpx.Response(400, json=graph_error(190, "Error validating access token")))

    with pytest.raises(MetaAPIError) as exc_info:
        await fetch_ad_data(client, "2025-01-15")

    assert isinstance(exc_info.value.kind, Auth)


@pytest.mark.asyncio
async def test_overall_deadline_bounds_polling(make_client, clock) -> None:
    client = make_client(graph_api({}, poll_statuses=("Job Running",)))
    report = InsightsReport(client, poll_interval=5, timeout=300)

    with pytest.raises(DeadlineExceededError):
        await fetch_ad_data(client, "2025-01-15", report=report, deadline_seconds=12)

    assert sum(clock.sleeps) <= 12


@pytest.mark.asyncio
async def test_save_output_round_trip(make_client, tmp_path) -> None:
    client = make_client(graph_api({"ad_1": "ACTIVE", "ad_2": "PAUSED", "ad_3": "ARCHIVED"}))
    output = await fetch_ad_data(client, "2025-01-15")

    path = save_output(output, "2025-01-15", ACCOUNT_ID, tmp_path / "out")

    assert path == output_path("2025-01-15", ACCOUNT_ID, tmp_path / "out")
    assert path.name == f"ad_data_{ACCOUNT_ID}_2025-01-15.json"
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert set(saved) == {"metadata", "data"}
    assert saved["metadata"]["summary"]["unique_ads"] == 3
    assert saved["data"][0]["actions"] == []
    assert saved["data"][2]["status"] == "PAUSED"
