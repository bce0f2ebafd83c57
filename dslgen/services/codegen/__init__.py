"""Kotlin DSL code generation."""

from .dispatch import BranchKind, DispatchBranch, DispatcherRenderer, DispatchTable
from .kotlin import GeneratedFile, KotlinFileWriter
from .scope import ScopeRenderer
from .service import CodegenInput, CodegenOutput, CodegenService

__all__ = [
    "BranchKind",
    "CodegenInput",
    "CodegenOutput",
    "CodegenService",
    "DispatchBranch",
    "DispatchTable",
    "DispatcherRenderer",
    "GeneratedFile",
    "KotlinFileWriter",
    "ScopeRenderer",
]
