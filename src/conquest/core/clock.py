"""Request time and civil-day helpers.

Business logic never reads the wall clock directly: every request resolves a
single epoch-second "request time", taken from the client's ``x-isu-date``
header when it parses and from the server clock otherwise.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

JST = timezone(timedelta(hours=9), "JST")


def now_epoch() -> int:
    return int(time.time())


def parse_request_time(header_value: str | None) -> int:
    """Epoch seconds from an RFC 1123 date header, falling back to server time."""
    if header_value:
        try:
            parsed = parsedate_to_datetime(header_value)
        except (TypeError, ValueError):
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return int(parsed.timestamp())
    return now_epoch()


def jst_date(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, JST)
