from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

_FRACTION_RE = re.compile(r"\.(\d+)")


def utcnow() -> datetime:
    """Timezone-aware 'now' in UTC."""
    return datetime.now(timezone.utc)


def _six_digit_fraction(match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    - None / "" / garbage -> None
    - fractional seconds are optional and may have any number of digits
      ("2024-01-01T00:00:00.5Z", "2024-01-01T00:00:00.123Z" and
      "2024-01-01T00:00:00Z" all parse)
    - naive values are interpreted as UTC
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    # fromisoformat on 3.10 only takes 3 or 6 fraction digits
    s = _FRACTION_RE.sub(_six_digit_fraction, s, count=1)

    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
