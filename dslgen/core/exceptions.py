"""
Custom exception hierarchy for dslgen.

All exceptions inherit from DslGenError to enable consistent error handling
across the generator. Each exception type carries context for debugging and logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class DslGenError(Exception):
    """Base exception for all dslgen errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class DescriptorError(DslGenError):
    """Raised when a module descriptor cannot be read or validated."""

    source: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        if self.source:
            return f"Invalid module descriptor '{self.source}': {base}"
        return f"Invalid module descriptor: {base}"


@dataclass
class UnresolvedSupertypeError(DslGenError):
    """Raised when a view names a super type that no processed module defines.

    A scope type cannot be emitted with a dangling parent, so this stops the run.
    """

    view_name: str = ""
    super_name: str = ""

    def __str__(self) -> str:
        return (
            f"Super type '{self.super_name}' of view '{self.view_name}' was not found "
            f"in the module or its dependencies: {self.message}"
        )


@dataclass
class SupertypeCycleError(DslGenError):
    """Raised when a view's super type chain never reaches a root."""

    chain: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Super type cycle: {' -> '.join(self.chain)}"


@dataclass
class ClassFileError(DslGenError):
    """Raised when class bytes are truncated or not a class file."""

    class_name: str = ""
    offset: int = 0

    def __str__(self) -> str:
        where = f" in '{self.class_name}'" if self.class_name else ""
        return f"Malformed class file{where} at offset {self.offset}: {self.message}"
