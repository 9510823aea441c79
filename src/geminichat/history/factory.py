"""Factory for creating chat history storage backends."""

from typing import Any

from .base import StorageBackend


def create_storage_backend(
    backend: str = "file",
    **kwargs: Any
) -> StorageBackend:
    """Create a storage backend.

    Args:
        backend: Backend type ("memory" or "file")
        **kwargs: Backend-specific configuration
            For file:
                - directory: str | Path (required)

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing
    """
    if backend == "memory":
        from .in_memory import InMemoryStorage
        return InMemoryStorage(**kwargs)

    elif backend == "file":
        if "directory" not in kwargs:
            raise TypeError("File backend requires 'directory'")
        from .file import FileStorage
        return FileStorage(**kwargs)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: memory, file"
    )
