"""ADPULSE — Raw Insight Row Shapes (as returned by Meta).

Numeric metrics arrive as strings. Rows are kept as plain dicts; these
TypedDicts document the keys the transformer reads.
"""

from typing import List, TypedDict


class FacebookAction(TypedDict):
    """One entry of ``actions`` / ``action_values`` / ``purchase_roas``."""

    action_type: str
    value: str


class FacebookInsightRow(TypedDict, total=False):
    """Raw ad-level hourly insight row."""

    account_id: str
    account_currency: str
    campaign_id: str
    campaign_name: str
    adset_id: str
    adset_name: str
    ad_id: str
    ad_name: str
    objective: str
    impressions: str
    clicks: str
    spend: str
    actions: List[FacebookAction]
    action_values: List[FacebookAction]
    purchase_roas: List[FacebookAction]
    date_start: str
    date_stop: str
    hourly_stats_aggregated_by_advertiser_time_zone: str
