from datetime import datetime, timezone


def utcnow() -> datetime:
    # MongoDB round-trips naive UTC datetimes, so everything stored stays naive
    return datetime.now(timezone.utc).replace(tzinfo=None)
