"""Bytecode nullability index."""

from .service import ClassPath, NullabilityIndex

__all__ = ["ClassPath", "NullabilityIndex"]
