"""
Bytecode nullability data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Nullability(str, Enum):
    """Nullability of a method's first parameter."""

    NULLABLE = "nullable"
    NON_NULL = "non_null"
    UNKNOWN = "unknown"

    def as_optional_bool(self) -> bool | None:
        """True for nullable, False for non-null, None when unknown."""
        if self is Nullability.NULLABLE:
            return True
        if self is Nullability.NON_NULL:
            return False
        return None


class AnnotationVocabulary(Enum):
    """Annotation descriptor pairs that mark parameter nullability.

    Platform SDK stubs built from sources use the "recently" flavour; regular
    libraries use the stable androidx annotations.
    """

    STABLE = ("Landroidx/annotation/Nullable;", "Landroidx/annotation/NonNull;")
    RECENT = ("Landroidx/annotation/RecentlyNullable;", "Landroidx/annotation/RecentlyNonNull;")

    @property
    def nullable(self) -> str:
        return self.value[0]

    @property
    def non_null(self) -> str:
        return self.value[1]

    def classify(self, descriptor: str) -> Nullability:
        if descriptor == self.nullable:
            return Nullability.NULLABLE
        if descriptor == self.non_null:
            return Nullability.NON_NULL
        return Nullability.UNKNOWN


@dataclass(frozen=True)
class MethodSignature:
    """Key of one nullability fact."""

    class_name: str
    method_name: str
    first_arg_type: str
