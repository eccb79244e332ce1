"""ADPULSE — Output File Models."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field

from adpulse.models.normalized_models import AdHourlyRecord


class OutputSummary(BaseModel):
    """Totals and distinct counts over one run's records."""

    total_impressions: int = 0
    total_clicks: int = 0
    total_spend: float = 0.0
    unique_ads: int = 0
    unique_campaigns: int = 0
    unique_adsets: int = 0


class OutputMetadata(BaseModel):
    account_id: str
    date: str
    platform: str = "facebook"
    fetched_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    total_records: int = 0
    summary: OutputSummary = OutputSummary()


class OutputFile(BaseModel):
    """The full output file schema: ``{metadata, data}``."""

    metadata: OutputMetadata
    data: List[AdHourlyRecord] = []
