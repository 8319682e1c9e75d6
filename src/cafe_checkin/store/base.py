"""Base remote store interface."""

from abc import ABC, abstractmethod
from typing import Any, Literal

Collection = Literal["cafes", "beans", "favorites", "orders"]
Record = dict[str, Any]


class BaseStore(ABC):
    """Abstract base class for the remote record store."""

    @abstractmethod
    async def list(self, collection: Collection) -> list[Record]:
        """Return every record of a collection.

        Args:
            collection: Collection name

        Returns:
            Records, newest first for ``orders`` and unordered otherwise

        Raises:
            RemoteError: If the store cannot be reached or rejects the call
        """
        pass

    @abstractmethod
    async def insert(self, collection: Collection, fields: Record) -> Record:
        """Insert a record and return its canonical form.

        The returned record carries the server-assigned ``id`` and
        ``created_at``.

        Raises:
            RemoteError: If the store rejects the record
        """
        pass

    @abstractmethod
    async def delete(self, collection: Collection, matching: Record) -> None:
        """Delete records whose fields equal every value in ``matching``.

        Raises:
            RemoteError: If the store rejects the call
        """
        pass
