"""Base interface for storage backends."""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract base class for write-once blob storage backends."""

    @abstractmethod
    async def save(self, file_content: bytes, filename: str, subdir: str | None = None) -> tuple[str, str]:
        """
        Save file content under a generated unique name and return (file_path, checksum).

        Args:
            file_content: File content as bytes
            filename: Original filename (only its extension is used)
            subdir: Optional subdirectory within the storage root

        Returns:
            Tuple of (relative_file_path, checksum)
        """
        pass

    @abstractmethod
    async def retrieve(self, file_path: str) -> bytes:
        """
        Retrieve file content.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, file_path: str) -> None:
        """Delete file. Deleting a missing file is a no-op."""
        pass

    @abstractmethod
    async def exists(self, file_path: str) -> bool:
        """Check if file exists."""
        pass
