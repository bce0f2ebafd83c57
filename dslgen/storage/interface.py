"""
Storage backend interface.

Generated sources are addressed by slash-separated keys
(``dev/inkremental/dsl/android/widget/TextView.kt``) relative to the
backend's root, so the generator never builds filesystem paths itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract storage backend interface."""

    @abstractmethod
    async def store_text(self, key: str, content: str) -> str:
        """Store UTF-8 text and return the storage key.

        Args:
            key: Slash-separated key of the generated file
            content: File content

        Returns:
            The final storage key
        """
        ...
