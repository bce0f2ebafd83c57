"""
Local filesystem storage backend.

Writes generated sources under an output directory, creating package
directories on demand.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import aiofiles
import aiofiles.os

from .interface import StorageBackend


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: Path) -> None:
        """Initialize local storage.

        Args:
            base_path: Root directory of the generated sources
        """
        self.base_path = base_path.resolve()

    def _get_full_path(self, key: str) -> Path:
        """Map a key to a path below ``base_path``.

        Raises:
            ValueError: If the key is absolute or escapes the base directory
        """
        parts = PurePosixPath(key.replace("\\", "/")).parts
        if not parts or parts[0] == "/" or ".." in parts or any(":" in p for p in parts):
            raise ValueError(f"Invalid storage key: {key!r}")
        full_path = self.base_path.joinpath(*parts)
        # Symlinks inside the output tree must not lead out of it
        full_path.resolve().relative_to(self.base_path)
        return full_path

    async def store_text(self, key: str, content: str) -> str:
        """Store text content to filesystem.

        Newlines are written as-is so output is identical across platforms.
        """
        full_path = self._get_full_path(key)
        await aiofiles.os.makedirs(full_path.parent, exist_ok=True)

        async with aiofiles.open(full_path, "w", encoding="utf-8", newline="\n") as f:
            await f.write(content)
        return key
