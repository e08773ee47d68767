from datetime import datetime, timezone


def utcnow() -> datetime:
    # Naive UTC; every timestamp column is a plain DateTime (sa_type=DateTime)
    return datetime.now(timezone.utc).replace(tzinfo=None)
