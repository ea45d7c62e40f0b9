"""Host storage backends for persisted values."""

from abc import ABC, abstractmethod

from sqlalchemy.engine import Engine
from sqlmodel import Session

from digest.log import get_logger
from digest.models.rows import StoredValue, get_current_timestamp

logger = get_logger(__name__)


class HostStorage(ABC):
    """Async key/value storage provided by the host."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is unset."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass


class MemoryStorage(HostStorage):
    """Process-local storage."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SQLiteStorage(HostStorage):
    """Storage persisted in the ``stored_value`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def get(self, key: str) -> str | None:
        with Session(self.engine) as session:
            row = session.get(StoredValue, key)
            return row.value if row else None

    async def set(self, key: str, value: str) -> None:
        with Session(self.engine) as session:
            row = session.get(StoredValue, key)
            if row is None:
                row = StoredValue(key=key, value=value)
            else:
                row.value = value
                row.updated_at = get_current_timestamp()
            session.add(row)
            session.commit()
        logger.debug(f"Stored value for {key}")
