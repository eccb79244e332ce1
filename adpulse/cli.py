"""ADPULSE — Command-line entry point.

Usage:
  python -m adpulse <YYYY-MM-DD>
  python -m adpulse <YYYY-MM-DD> <ACCOUNT_ID> <ACCESS_TOKEN>

With only the date, the account id and token come from FB_ACCOUNT_ID /
FB_ACCESS_TOKEN (environment or .env).
"""

import argparse
import asyncio
from typing import List, Optional

from adpulse.config import settings
from adpulse.connectors.meta.client import MetaClient
from adpulse.analyzer.pipeline import fetch_ad_data
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
from adpulse.storage import save_output

logger = get_logger("cli")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="adpulse",
        description="Fetch ad-level hourly Facebook Ads performance for one day.",
    )
    parser.add_argument("date", help="Day to fetch, YYYY-MM-DD")
    parser.add_argument("account_id", nargs="?", default=None, help="Numeric ad account id")
    parser.add_argument("access_token", nargs="?", default=None, help="Graph API access token")
    parser.add_argument("--output-dir", default=None, help="Directory for the JSON output")
    return parser.parse_args(argv)


def _resolve_credentials(args: argparse.Namespace) -> tuple[str, str]:
    if args.account_id and args.access_token:
        return validate_account_id(args.account_id), args.access_token
    if args.account_id or args.access_token:
        raise ValidationError("Pass both ACCOUNT_ID and ACCESS_TOKEN, or neither.")
    if not settings.fb_access_token:
        raise ValidationError(
            "Missing FB_ACCESS_TOKEN environment variable. "
            "Copy .env.example to .env and fill in your access token."
        )
    if not settings.fb_account_id:
        raise ValidationError(
            "Missing FB_ACCOUNT_ID environment variable. "
            "Copy .env.example to .env and fill in your ad account ID."
        )
    return validate_account_id(settings.fb_account_id), settings.fb_access_token


def describe_failure(error: Exception) -> str:
    """User-facing message for a failed run."""
    if isinstance(error, ValidationError):
        return f"Validation error: {error}"
    if isinstance(error, MetaAPIError) and isinstance(error.kind, Auth):
        return (
            f"Authentication error (code {error.kind.code}): {error.kind.message}. "
            'Check that your access token is valid and has the "ads_read" permission.'
        )
    if isinstance(error, MetaAPIError) and isinstance(error.kind, RateLimit):
        return f"Rate limit exceeded after retries: {error}. Try again in a few minutes."
    if isinstance(error, (ReportTimeoutError, DeadlineExceededError)):
        return f"Timed out: {error}"
    if isinstance(error, MetaAPIError):
        code = getattr(error.kind, "code", None)
        return f"Facebook API error (code {code}): {error}"
    return f"Unexpected error: {error}"


async def run(date: str, account_id: str, access_token: str, output_dir: Optional[str]) -> str:
    async with MetaClient(access_token, account_id) as client:
        output = await fetch_ad_data(client, date, account_id)

    path = save_output(output, date, account_id, output_dir)
    s = output.metadata.summary
    logger.info(
        f"Total records: {output.metadata.total_records}; "
        f"impressions {s.total_impressions:,}, clicks {s.total_clicks:,}, "
        f"spend {s.total_spend:.2f}, unique ads {s.unique_ads}, "
        f"campaigns {s.unique_campaigns}, ad sets {s.unique_adsets}"
    )
    return str(path)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        date = validate_date(args.date)
        account_id, access_token = _resolve_credentials(args)
        asyncio.run(run(date, account_id, access_token, args.output_dir))
    except FetchError as e:
        logger.error(describe_failure(e))
        return 1
    except Exception as e:
        logger.exception(describe_failure(e))
        return 1
    return 0
