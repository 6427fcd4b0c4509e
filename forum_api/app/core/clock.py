"""Time source for ``created_at`` fields."""

from datetime import datetime, timezone


def now_iso() -> str:
    """Return the current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    The fixed width format sorts lexicographically in time order, so
    timestamps can be compared and ordered as plain strings in SQLite.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
