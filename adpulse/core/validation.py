"""ADPULSE — Input Validation."""

import re
from datetime import datetime

from adpulse.core.errors import ValidationError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ACCOUNT_RE = re.compile(r"^\d+$")


def validate_date(date: str) -> str:
    """Require ``YYYY-MM-DD`` and a real calendar date."""
    if not _DATE_RE.match(date or ""):
        raise ValidationError(f'Invalid date format: "{date}". Expected YYYY-MM-DD.')
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f'Invalid date: "{date}" is not a valid calendar date.')
    return date


def validate_account_id(account_id: str) -> str:
    """Require a numeric ad account id, without the ``act_`` prefix."""
    if (account_id or "").startswith("act_"):
        raise ValidationError(
            f'Invalid account ID: "{account_id}". Pass the numeric ID without "act_".'
        )
    if not _ACCOUNT_RE.match(account_id or ""):
        raise ValidationError(f'Invalid account ID: "{account_id}". Expected digits only.')
    return account_id
