"""ADPULSE — Summary Engine.

Totals and distinct counts computed from the normalized records only.
Pagination metadata from Meta is never used here since pages may repeat rows.
"""

from collections import Counter
from typing import Dict, Iterable, List

from adpulse.models.normalized_models import AdHourlyRecord
from adpulse.models.output_models import OutputSummary


def compute_summary(records: List[AdHourlyRecord]) -> OutputSummary:
    """Fold records into totals; spend is rounded once, after summation."""
    total_spend = sum(r.spend for r in records)
    return OutputSummary(
        total_impressions=sum(int(r.impressions) for r in records),
        total_clicks=sum(int(r.clicks) for r in records),
        total_spend=round(total_spend, 2),
        unique_ads=len({r.ad_id for r in records}),
        unique_campaigns=len({r.campaign_id for r in records}),
        unique_adsets=len({r.adset_id for r in records}),
    )


def status_distribution(statuses: Iterable[str]) -> Dict[str, int]:
    """Count ads per status, most common first."""
    return dict(Counter(statuses).most_common())
