from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC time without tzinfo, matching what the database hands back."""
    return datetime.now(UTC).replace(tzinfo=None)
