"""Date helpers."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    DATETIME columns carry no timezone, so every timestamp is stored as
    naive UTC and serialized with a Z suffix on the way out.
    """
    return datetime.now(UTC).replace(tzinfo=None)
