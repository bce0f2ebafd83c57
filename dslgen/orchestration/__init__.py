"""Orchestration module for dslgen."""

from .pipeline import (
    GenerationOutput,
    GeneratorPipeline,
    ResolvedModule,
    annotate_nullability,
    build_graph,
    generate,
    generate_sync,
    load_module,
)

__all__ = [
    "GenerationOutput",
    "GeneratorPipeline",
    "ResolvedModule",
    "annotate_nullability",
    "build_graph",
    "generate",
    "generate_sync",
    "load_module",
]
