"""
Design (utils.py)
- Purpose: Reusable helpers: timestamps (ISO-8601 UTC), ticket ids, prefix
           normalization and local display formatting.
- Inputs: Various helper parameters.
- Outputs: Helper results (strings, datetimes).
- Side effects: None (utc_now_iso reads the clock, new_ticket_id draws randomness).
- Thread-safety: Stateless; safe to call from any thread.
"""

import uuid
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """
    Purpose: Current time as an ISO-8601 UTC string with millisecond precision.
    Outputs: e.g. "2024-03-01T18:04:05.123Z" (same shape a browser's toISOString produces).
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Purpose: Parse an ISO-8601 timestamp, accepting a trailing 'Z'.
    Outputs: timezone-aware datetime (naive input is assumed UTC).
    Raises: ValueError on unparseable input.
    """
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_local(value: str | None, empty: str = "-") -> str:
    """Render a stored timestamp in local time for display; unparseable values are shown raw."""
    if not value:
        return empty
    try:
        return parse_iso(value).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def new_ticket_id() -> str:
    return str(uuid.uuid4())


def normalize_prefix(raw: str) -> str:
    """
    Purpose: Normalize a user-typed prefix ("  vip " -> "VIP").
    Outputs: Stripped, uppercased prefix ('' if empty).
    """
    if not raw:
        return ""
    return raw.strip().upper()
