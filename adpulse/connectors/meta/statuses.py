"""ADPULSE — Ad Status Enrichment.

Insights rows with the hourly breakdown carry no delivery status, so the
ads seen in the report are looked up afterwards in batches:

  GET /?ids=id1,id2,...&fields=effective_status

A batch that still fails after the client's retries does not abort the run;
its ads are reported as ``UNKNOWN``.
"""

from typing import Dict, Iterable, Iterator, List

from adpulse.config import settings
from adpulse.connectors.meta.client import MetaClient
from adpulse.connectors.meta.endpoints import build_status_request
from adpulse.core.errors import MetaAPIError
from adpulse.core.logging import get_logger

logger = get_logger("meta.statuses")

UNKNOWN_STATUS = "UNKNOWN"


def unique_ids(ids: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(i for i in ids if i))


def batched(items: List[str], size: int) -> Iterator[List[str]]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


async def fetch_ad_statuses(
    client: MetaClient,
    ad_ids: Iterable[str],
    batch_size: int | None = None,
) -> Dict[str, str]:
    """Return a map of ad id → effective_status for every id in ``ad_ids``."""
    batch_size = batch_size or settings.status_batch_size
    ids = unique_ids(ad_ids)
    status_map: Dict[str, str] = {}
    if not ids:
        return status_map

    logger.info(f"Fetching statuses for {len(ids)} unique ads…")

    for index, batch in enumerate(batched(ids, batch_size), start=1):
        request = build_status_request(batch, client.access_token)
        try:
            result = await client.execute(request)
        except MetaAPIError as e:
            logger.warning(
                f"Could not fetch statuses for batch {index} ({len(batch)} ads): {e}. "
                f'Status will be set to "{UNKNOWN_STATUS}".',
                extra={"batch": index},
            )
            for ad_id in batch:
                status_map.setdefault(ad_id, UNKNOWN_STATUS)
            continue

        for ad_id, data in (result or {}).items():
            status = data.get("effective_status") if isinstance(data, dict) else None
            status_map.setdefault(str(ad_id), status or UNKNOWN_STATUS)

        # Ids Meta silently dropped from the response.
        for ad_id in batch:
            status_map.setdefault(ad_id, UNKNOWN_STATUS)

    logger.info(f"Fetched statuses for {len(status_map)} ads.")
    return status_map
