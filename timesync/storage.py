import logging
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timesync.models.key_value import KeyValueEntry
from timesync.scheduling.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def read(self, key: str) -> str | None:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class SqlKeyValueStore:
    """Key-value store backed by the ``key_value_store`` table.

    Each write commits or rolls back as a unit, so a reader never observes a
    partially written blob.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def read(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise PersistenceError() from exc
        finally:
            db.close()

    def write(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Failed to persist key %s.', key)
            raise PersistenceError() from exc
        finally:
            db.close()
