"""In-memory storage backend.

Simple dict-based storage for session-only history.
Data is lost when the application exits.
"""

from .base import StorageBackend


class InMemoryStorage(StorageBackend):
    """In-memory storage (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._values.get(key)

    def write(self, key: str, data: str) -> None:
        self._values[key] = data

    @property
    def backend_type(self) -> str:
        return "memory"
