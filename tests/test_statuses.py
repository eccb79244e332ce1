from __future__ import annotations

from typing import List

import httpx
import pytest

from adpulse.connectors.meta.statuses import UNKNOWN_STATUS, batched, fetch_ad_statuses, unique_ids

from conftest import TOKEN, graph_error


def _status_server(failing_ids: set[str] | None = None, auth_failing_ids: set[str] | None = None):
    batches: List[List[str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v21.0/"
        assert request.url.params["fields"] == "effective_status"
        assert request.url.params["access_token"] == TOKEN
        ids = request.url.params["ids"].split(",")
        batches.append(ids)
        if failing_ids and failing_ids & set(ids):
            return httpx.Response(503, text="upstream unavailable")
        if auth_failing_ids and auth_failing_ids & set(ids):
            return httpx.Response(400, json=graph_error(200, "Requires ads_read permission"))
        return httpx.Response(
            200,
            json={i: {"id": i, "effective_status": "ACTIVE"} for i in ids},
        )

    return handler, batches


def test_unique_ids_keeps_first_seen_order() -> None:
    assert unique_ids(["b", "a", "b", "", "c", "a"]) == ["b", "a", "c"]


def test_batched() -> None:
    assert [len(b) for b in batched([str(i) for i in range(120)], 50)] == [50, 50, 20]
    with pytest.raises(ValueError):
        list(batched(["a"], 0))


@pytest.mark.asyncio
async def test_empty_input_makes_no_requests(make_client) -> None:
    handler, batches = _status_server()
    assert await fetch_ad_statuses(make_client(handler), []) == {}
    assert batches == []


@pytest.mark.asyncio
async def test_statuses_are_fetched_in_batches(make_client) -> None:
    handler, batches = _status_server()
    ad_ids = [f"ad_{i}" for i in range(120)]

    status_map = await fetch_ad_statuses(make_client(handler), ad_ids + ad_ids[:10], batch_size=50)

    assert [len(b) for b in batches] == [50, 50, 20]
    assert len(status_map) == 120
    assert set(status_map.values()) == {"ACTIVE"}


@pytest.mark.asyncio
async def test_failed_batch_degrades_to_unknown(make_client, clock) -> None:
    ad_ids = [f"ad_{i}" for i in range(120)]
    handler, batches = _status_server(failing_ids={"ad_75"})

    status_map = await fetch_ad_statuses(make_client(handler), ad_ids, batch_size=50)

    # the second batch is tried max_retries (3) times
    assert [len(b) for b in batches] == [50, 50, 50, 50, 20]
    assert len(status_map) == 120
    unknown = [i for i, s in status_map.items() if s == UNKNOWN_STATUS]
    assert sorted(unknown) == sorted(ad_ids[50:100])
    assert sum(1 for s in status_map.values() if s == "ACTIVE") == 70
    assert len(clock.sleeps) == 2


@pytest.mark.asyncio
async def test_fatal_batch_error_also_degrades(make_client) -> None:
    handler, batches = _status_server(auth_failing_ids={"ad_1"})

    status_map = await fetch_ad_statuses(make_client(handler), ["ad_1", "ad_2"], batch_size=1)

    assert status_map == {"ad_1": UNKNOWN_STATUS, "ad_2": "ACTIVE"}
    assert len(batches) == 2


@pytest.mark.asyncio
async def test_ids_missing_from_response_are_unknown(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "ad_1": {"id": "ad_1", "effective_status": "PAUSED"},
                "ad_2": {"id": "ad_2"},
            },
        )

    status_map = await fetch_ad_statuses(make_client(handler), ["ad_1", "ad_2", "ad_3"])

    assert status_map == {"ad_1": "PAUSED", "ad_2": UNKNOWN_STATUS, "ad_3": UNKNOWN_STATUS}
