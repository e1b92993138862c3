"""Date helpers shared by normalization and filtering.

All timestamps leaving this module are ISO-8601 strings in UTC so they sort
and compare the same way regardless of which upstream produced them.
"""

import re
from datetime import UTC, datetime

# Sorts after every real date when ordering newest-first
EARLIEST = datetime.min.replace(tzinfo=UTC)

_ACF_COMPACT_DATE = re.compile(r"^\d{8}$")


def to_iso(value: datetime) -> str:
    """Render a datetime as an ISO-8601 string in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def from_unix_seconds(seconds: int | float) -> str:
    """Convert a Unix epoch timestamp (seconds) to an ISO-8601 string."""
    return to_iso(datetime.fromtimestamp(seconds, tz=UTC))


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime string.

    Naive values are assumed to be UTC. Returns None for empty or
    unparseable input.
    """
    if not value or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_cms_date(value: str | None) -> str | None:
    """Normalize a CMS creation date to ISO-8601.

    WordPress/ACF hands out dates as ``dd/mm/yyyy`` (formatted fields),
    ``yyyymmdd`` (raw date picker values) or ISO strings.

    Returns:
        ISO-8601 string, or None when the value is empty or not a date
    """
    if not value or not value.strip():
        return None

    text = value.strip()

    if "/" in text:
        try:
            parsed = datetime.strptime(text, "%d/%m/%Y")
        except ValueError:
            return None
        return to_iso(parsed)

    if _ACF_COMPACT_DATE.match(text):
        try:
            parsed = datetime.strptime(text, "%Y%m%d")
        except ValueError:
            return None
        return to_iso(parsed)

    parsed_iso = parse_timestamp(text)
    return to_iso(parsed_iso) if parsed_iso else None


def sort_key(value: str | None) -> datetime:
    """Key for ordering ISO strings chronologically; missing dates compare as earliest."""
    return parse_timestamp(value) or EARLIEST
