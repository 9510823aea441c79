"""Abstract base class for chat history storage backends.

The abstraction hides:
- Where the serialized history lives (file, memory)
- How a write is made atomic
"""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Key-value storage for serialized chat history.

    Values are opaque strings, always read and written whole.
    Implementations raise PersistenceError on failure.
    """

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the stored value, or None if nothing was stored yet."""

    @abstractmethod
    def write(self, key: str, data: str) -> None:
        """Replace the stored value."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
