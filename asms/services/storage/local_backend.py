"""Local filesystem storage backend implementation."""

import hashlib
import os
import uuid
from pathlib import Path

import aiofiles

from asms.services.storage.base import StorageBackend


def calculate_checksum(content: bytes) -> str:
    """Calculate SHA256 checksum of file content."""
    return hashlib.sha256(content).hexdigest()


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str | Path):
        """
        Initialize local storage backend.

        Args:
            base_path: Base directory path for storage
        """
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _generate_file_path(self, original_filename: str, subdir: str | None = None) -> Path:
        """Generate a UUID-based file path keeping only the original extension."""
        ext = Path(original_filename).suffix.lower()
        filename = f"{uuid.uuid4().hex}{ext}"
        if subdir:
            file_dir = self._resolve_path(subdir)
            file_dir.mkdir(parents=True, exist_ok=True)
            return file_dir / filename
        return self.base_path / filename

    def _resolve_path(self, file_path: str | Path) -> Path:
        """
        Resolve a stored relative path inside the storage root.

        Raises:
            ValueError: If the path points outside the storage root
        """
        path = (self.base_path / file_path).resolve()
        if path != self.base_path and self.base_path not in path.parents:
            raise ValueError(f"Path escapes storage root: {file_path}")
        return path

    async def save(self, file_content: bytes, filename: str, subdir: str | None = None) -> tuple[str, str]:
        """
        Save file content to local filesystem.

        Files are opened in exclusive mode so an existing file is never overwritten.

        Returns:
            Tuple of (relative_file_path, checksum)
        """
        file_path = self._generate_file_path(filename, subdir)
        checksum = calculate_checksum(file_content)

        async with aiofiles.open(file_path, "xb") as f:
            await f.write(file_content)

        # Return path relative to base_path for storage
        relative_path = file_path.relative_to(self.base_path)
        return relative_path.as_posix(), checksum

    async def retrieve(self, file_path: str) -> bytes:
        """
        Retrieve file content from local filesystem.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        full_path = self._resolve_path(file_path)
        async with aiofiles.open(full_path, "rb") as f:
            return await f.read()

    async def delete(self, file_path: str) -> None:
        """Delete file from local filesystem if it exists."""
        full_path = self._resolve_path(file_path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            pass

    async def exists(self, file_path: str) -> bool:
        """Check if file exists in local filesystem."""
        return self._resolve_path(file_path).is_file()
