from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    # Naive UTC, so values compare equally after a round trip through SQLite.
    return datetime.now(timezone.utc).replace(tzinfo=None)
