"""ADPULSE — Meta API Routes."""

from fastapi import APIRouter, HTTPException, Query

from adpulse.analyzer.pipeline import fetch_ad_data
from adpulse.connectors.meta.client import MetaClient
from adpulse.core.errors import (
    Auth,
    DeadlineExceededError,
    FetchError,
    MetaAPIError,
    RateLimit,
    ReportTimeoutError,
    ValidationError,
)
from adpulse.core.logging import get_logger
from adpulse.core.validation import validate_account_id, validate_date
from adpulse.models.output_models import OutputFile
from adpulse.storage import save_output

logger = get_logger("api.meta")

router = APIRouter(prefix="/meta", tags=["Meta"])


def _status_for(error: FetchError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, (ReportTimeoutError, DeadlineExceededError)):
        return 504
    if isinstance(error, MetaAPIError) and isinstance(error.kind, Auth):
        return 401
    if isinstance(error, MetaAPIError) and isinstance(error.kind, RateLimit):
        return 429
    return 502


@router.get("/hourly", response_model=OutputFile)
async def get_hourly_ad_data(
    date: str = Query(..., description="Day to fetch (YYYY-MM-DD)"),
    save: bool = Query(False, description="Also write the output file to disk"),
):
    """Fetch ad-level hourly performance for the configured account.

    Runs the async insights report, resolves ad statuses and returns the
    normalized records with their summary.
    """
    client = MetaClient()
    try:
        validate_date(date)
        validate_account_id(client.ad_account_id)
        output = await fetch_ad_data(client, date)
        if save:
            save_output(output, date, client.ad_account_id)
        return output
    except FetchError as e:
        logger.error(f"Hourly fetch failed: {e}")
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    finally:
        await client.close()
