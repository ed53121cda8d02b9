"""Factory for creating storage backends."""

import logging
from pathlib import Path

from asms.config import settings
from asms.services.storage.base import StorageBackend
from asms.services.storage.local_backend import LocalStorageBackend

logger = logging.getLogger(__name__)


def get_storage_backend(backend_type: str | None = None, base_path: str | Path | None = None) -> StorageBackend:
    """
    Factory function to create storage backend instance.

    Args:
        backend_type: Storage backend type. Defaults to settings.storage_backend
        base_path: Base path for local storage. Defaults to settings.storage_path

    Raises:
        ValueError: If backend_type is unsupported
    """
    backend_type = backend_type or settings.storage_backend

    if backend_type.lower() == "local":
        return LocalStorageBackend(base_path or settings.storage_path)

    raise ValueError(f"Unsupported storage backend: {backend_type}. Supported backends: local")


_default_backend: StorageBackend | None = None


def get_default_storage_backend() -> StorageBackend:
    """Get the storage backend configured from settings, created on first use."""
    global _default_backend
    if _default_backend is None:
        _default_backend = get_storage_backend()
        logger.info("Storage backend initialized", extra={"backend": settings.storage_backend})
    return _default_backend
