from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime.

    The store's clock: every server-assigned timestamp comes from here.
    """
    return datetime.now(UTC)
