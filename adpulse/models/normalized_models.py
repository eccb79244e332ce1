"""ADPULSE — Normalized Ad Hourly Records.

One record per (ad, hour) with numeric metrics and the ad's resolved
delivery status. This is the row shape written to the output file.
"""

from typing import List, Optional, Union

from pydantic import BaseModel


class ActionEntry(BaseModel):
    """A single conversion/action count."""

    type: str
    count: Union[int, float]


class AdHourlyRecord(BaseModel):
    """Clean ad-level hourly record."""

    # Metadata
    account_id: str = ""
    date: str = ""
    hour: str = ""
    campaign_id: str = ""
    campaign_name: str = ""
    adset_id: str = ""
    adset_name: str = ""
    ad_id: str = ""
    ad_name: str = ""
    currency: str = ""
    status: str
    """Ad effective status (ACTIVE, PAUSED, ARCHIVED, …) or UNKNOWN."""
    objective: str = ""

    # Metrics
    impressions: int = 0
    clicks: int = 0
    spend: float = 0.0
    purchase_roas: Optional[float] = None
    purchase_value: Optional[float] = None
    actions: List[ActionEntry] = []
