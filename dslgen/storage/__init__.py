"""Storage abstraction for generated sources."""

from .interface import StorageBackend
from .local import LocalStorageBackend

__all__ = ["StorageBackend", "LocalStorageBackend"]
