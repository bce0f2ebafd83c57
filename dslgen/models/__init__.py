"""
dslgen data models.

Pydantic models for module descriptors and plain value types for the
bytecode nullability index.
"""

from .bytecode import AnnotationVocabulary, MethodSignature, Nullability
from .descriptor import (
    AttrModel,
    DslTransformer,
    FunctionModel,
    ModuleModel,
    ParameterModel,
    ResolvedSupertype,
    TypeModel,
    UnresolvedSupertype,
    ViewModel,
)

__all__ = [
    # Bytecode models
    "AnnotationVocabulary",
    "MethodSignature",
    "Nullability",
    # Descriptor models
    "AttrModel",
    "DslTransformer",
    "FunctionModel",
    "ModuleModel",
    "ParameterModel",
    "ResolvedSupertype",
    "TypeModel",
    "UnresolvedSupertype",
    "ViewModel",
]
