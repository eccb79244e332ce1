"""ADPULSE — Async Insights Report Workflow.

Ad-level hourly insights are too heavy for a synchronous GET (Meta answers
HTTP 500 / code 1, "Please reduce the amount of data"), so they go through
the async report flow:

  1. POST /act_{id}/insights          → report_run_id
  2. GET  /{report_run_id}             → poll async_status until terminal
  3. GET  /{report_run_id}/insights    → paginate the finished rows

Every call runs through ``MetaClient.execute``, so polling is subject to the
same retry and rate-limit policy as any other request. Rate-limit waits
during polling count against the report timeout.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from adpulse.config import settings
from adpulse.connectors.meta.client import MetaClient
from adpulse.connectors.meta.endpoints import (
    build_insights_request,
    build_report_results_request,
    build_report_status_request,
)
from adpulse.core.errors import (
    ApiError,
    MetaAPIError,
    ReportJobError,
    ReportTimeoutError,
)
from adpulse.core.logging import get_logger

logger = get_logger("meta.reports")

JOB_COMPLETED = "Job Completed"
JOB_FAILED = "Job Failed"
JOB_SKIPPED = "Job Skipped"


class ReportStatus(str, Enum):
    """Lifecycle of one async report as seen by this client."""

    CREATED = "created"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"

    @property
    def terminal(self) -> bool:
        return self not in (ReportStatus.CREATED, ReportStatus.POLLING)


@dataclass
class ReportJob:
    """Client-side view of an async insights report."""

    report_id: str
    status: ReportStatus = ReportStatus.CREATED
    percent_complete: float = 0
    async_status: str = ""
    polls: int = 0
    submitted_at: float = 0.0


class InsightsReport:
    """Submit → poll → fetch for one ad-level hourly insights report."""

    def __init__(
        self,
        client: MetaClient,
        poll_interval: float | None = None,
        timeout: float | None = None,
    ):
        self.client = client
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.report_poll_interval_seconds
        )
        self.timeout = timeout if timeout is not None else settings.report_timeout_seconds

    async def submit(self, account_id: str, date: str) -> ReportJob:
        """Create the report; raises ``MetaAPIError`` if no id comes back."""
        logger.info(f"Creating async insights report for act_{account_id} on {date}")
        request = build_insights_request(account_id, date, self.client.access_token)
        response: Dict[str, Any] = await self.client.execute(request)

        report_id = response.get("report_run_id") if isinstance(response, dict) else None
        if not report_id:
            message = "POST /insights did not return a report_run_id"
            raise MetaAPIError(
                ApiError(code=None, subcode=None, message=message), message=message
            )

        job = ReportJob(
            report_id=str(report_id),
            status=ReportStatus.POLLING,
            submitted_at=self.client.clock(),
        )
        logger.info(f"Report created: {job.report_id}", extra={"report_id": job.report_id})
        return job

    async def wait(self, job: ReportJob) -> ReportJob:
        """Poll until the report completes; raise on failure, skip or timeout."""
        request = build_report_status_request(job.report_id, self.client.access_token)

        while not job.status.terminal:
            status = await self.client.execute(request)
            job.polls += 1
            job.async_status = status.get("async_status", "")
            job.percent_complete = status.get("async_percent_completion", job.percent_complete)

            if job.async_status == JOB_COMPLETED:
                job.status = ReportStatus.COMPLETED
                logger.info("Report ready (100%).", extra={"report_id": job.report_id})
                break

            if job.async_status in (JOB_FAILED, JOB_SKIPPED):
                job.status = (
                    ReportStatus.FAILED if job.async_status == JOB_FAILED else ReportStatus.SKIPPED
                )
                raise ReportJobError(job)

            if self.client.clock() - job.submitted_at > self.timeout:
                job.status = ReportStatus.TIMED_OUT
                raise ReportTimeoutError(job, self.timeout)

            logger.info(
                f"Report {job.async_status} ({job.percent_complete}%)… "
                f"waiting {self.poll_interval:g}s",
                extra={"report_id": job.report_id},
            )
            await self.client.sleep(self.poll_interval)

        return job

    async def fetch_results(self, job: ReportJob) -> List[Dict[str, Any]]:
        """Download every row of a completed report."""
        if job.status != ReportStatus.COMPLETED:
            raise ValueError(f"Report {job.report_id} is {job.status.value}, not completed")
        request = build_report_results_request(job.report_id, self.client.access_token)
        return await self.client.paginate(request)

    async def run(self, account_id: str, date: str) -> List[Dict[str, Any]]:
        job = await self.submit(account_id, date)
        await self.wait(job)
        return await self.fetch_results(job)

