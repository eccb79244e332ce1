"""ADPULSE — Fetch Pipeline Orchestrator.

Runs the full data flow for one account and one day:
  async report (submit → poll → paginate) → ad statuses → normalize → summarize

The run is single-pass and stateless: it either returns a complete
``OutputFile`` or raises. The only tolerated partial failure is a status
batch that could not be resolved (those ads are marked UNKNOWN).
"""

from typing import Optional

from adpulse.config import settings
from adpulse.connectors.meta.client import MetaClient
from adpulse.connectors.meta.reports import InsightsReport
from adpulse.connectors.meta.statuses import UNKNOWN_STATUS, fetch_ad_statuses, unique_ids
from adpulse.connectors.meta.transformer import transform_insights
from adpulse.analyzer.summary_engine import compute_summary, status_distribution
from adpulse.core.logging import get_logger
from adpulse.models.output_models import OutputFile, OutputMetadata

logger = get_logger("analyzer.pipeline")


async def fetch_ad_data(
    client: MetaClient,
    date: str,
    account_id: Optional[str] = None,
    report: Optional[InsightsReport] = None,
    deadline_seconds: Optional[float] = None,
) -> OutputFile:
    """Fetch ad-level hourly performance for ``date`` and build the output file."""
    account_id = account_id or client.ad_account_id
    if deadline_seconds is None:
        deadline_seconds = settings.overall_deadline_seconds
    client.start_deadline(deadline_seconds)

    logger.info(f"Fetching ad data for account {account_id} on {date}")

    # Step 1: insights only contain ads with activity on this date
    report = report or InsightsReport(client)
    insight_rows = await report.run(account_id, date)

    # Step 2: statuses for just those ads
    ad_ids = unique_ids(row.get("ad_id", "") for row in insight_rows)
    logger.info(f"Found {len(ad_ids)} unique ads with activity.")
    status_map = await fetch_ad_statuses(client, ad_ids)

    for status, count in status_distribution(status_map.values()).items():
        logger.info(f"Status {status}: {count} ads")

    # Step 3: normalize + summarize
    records = transform_insights(insight_rows, status_map, UNKNOWN_STATUS)
    if not records:
        logger.warning(
            "No data returned for the given date and account. "
            "The output will contain an empty data array."
        )

    summary = compute_summary(records)
    output = OutputFile(
        metadata=OutputMetadata(
            account_id=account_id,
            date=date,
            platform="facebook",
            total_records=len(records),
            summary=summary,
        ),
        data=records,
    )
    logger.info(f"{len(ad_ids)} ads → {len(records)} hourly records.")
    return output
