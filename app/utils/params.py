"""
utils/params.py -- Query parameter parsing for the transaction filters.

parse_date_param(value, name)   -> datetime | None
  Accepts a plain calendar date (YYYY-MM-DD, midnight UTC) or an RFC 3339
  timestamp (YYYY-MM-DDTHH:MM:SS[.fraction][Z|+HH:MM]). A missing offset is
  taken as UTC. Fractions longer than microseconds are truncated.

parse_amount_param(value, name) -> float | None
  Accepts any finite decimal number.

Empty strings and None mean "not supplied" and return None.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Optional

from app.errors import InvalidFilterError

DATE_ONLY_FORMAT = "%Y-%m-%d"

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})?$"
)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values are returned unchanged."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_date_param(value: object, name: str = "date") -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise InvalidFilterError(f"Invalid {name} format. Use ISO 8601 (YYYY-MM-DD or RFC3339)")

    raw = value.strip()
    if not raw:
        return None

    message = f"Invalid {name} format. Use ISO 8601 (YYYY-MM-DD or RFC3339)"

    if _DATE_ONLY_RE.match(raw):
        try:
            return datetime.strptime(raw, DATE_ONLY_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            raise InvalidFilterError(message)

    match = _TIMESTAMP_RE.match(raw)
    if match is None:
        raise InvalidFilterError(message)

    # Rebuild in the one shape fromisoformat() accepts on every supported
    # version: exactly six fraction digits and a numeric offset.
    normalized = match.group("base")
    if match.group("frac"):
        normalized += "." + match.group("frac")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset == "Z":
        normalized += "+00:00"
    elif offset:
        normalized += offset

    try:
        return ensure_utc(datetime.fromisoformat(normalized))
    except ValueError:
        raise InvalidFilterError(message)


def parse_amount_param(value: object, name: str = "amount") -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidFilterError(f"Invalid {name} format. Must be a number")
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            amount = float(raw)
        except ValueError:
            raise InvalidFilterError(f"Invalid {name} format. Must be a number")
    else:
        raise InvalidFilterError(f"Invalid {name} format. Must be a number")

    if not math.isfinite(amount):
        raise InvalidFilterError(f"Invalid {name} format. Must be a number")
    return amount
