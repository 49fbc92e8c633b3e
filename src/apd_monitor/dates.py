from datetime import datetime
from typing import Any

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"

# Upstream stores "no specific time" as local midnight, i.e. 03:00 UTC
MIDNIGHT_MARKER = "T03:00:00"


def _strip_utc(value: str) -> str:
    return value[:-1] if value.endswith("Z") else value


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


def format_date(value: Any) -> str:
    """Format an ISO date as dd/mm/yyyy, returning the input if it can't be parsed"""
    if not value or not isinstance(value, str):
        return ""
    try:
        return _parse(_strip_utc(value)).strftime(DATE_FORMAT)
    except ValueError:
        return value


def format_datetime(value: Any, omit_specific_time: bool = False) -> str:
    """Format an ISO date-time as dd/mm/yyyy hh:mm

    With ``omit_specific_time`` a value at the upstream midnight marker is
    returned as its bare ``yyyy-mm-dd`` prefix.
    """
    if not value or not isinstance(value, str):
        return ""
    dt = _strip_utc(value)
    if omit_specific_time and dt.endswith(MIDNIGHT_MARKER):
        return dt[:10]
    try:
        return _parse(dt).strftime(DATETIME_FORMAT)
    except ValueError:
        return dt
