import logging

from sqlalchemy.exc import SQLAlchemyError

from jobportal.db.session import build_engine
from jobportal.storage.base import (
    DuplicateApplication,
    DuplicateRecord,
    Storage,
    StorageError,
)
from jobportal.storage.memory import InMemoryStorage
from jobportal.storage.sql import SQLStorage

logger = logging.getLogger("jobportal.storage")


def select_storage(database_url: str) -> Storage:
    """
    Pick the storage for this process, once, at startup.

    Falls back to InMemoryStorage when the database cannot be reached; the
    in-memory data is never reconciled with the database afterwards.
    """
    try:
        engine = build_engine(database_url)
        with engine.connect():
            pass
        storage = SQLStorage(engine)
        storage.create_tables()
    except (SQLAlchemyError, ImportError) as e:
        logger.error("❌ Database unavailable (%s) - falling back to in-memory storage", e)
        return InMemoryStorage()

    logger.info("✅ Database connected")
    return storage


__all__ = [
    "DuplicateApplication",
    "DuplicateRecord",
    "InMemoryStorage",
    "SQLStorage",
    "Storage",
    "StorageError",
    "select_storage",
]
