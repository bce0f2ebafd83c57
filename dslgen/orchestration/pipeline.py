"""
Main pipeline orchestration for dslgen.

One run reads the dependency descriptors and the primary descriptor, links the
view graph, optionally annotates attribute types from bytecode nullability,
resolves attribute candidates and emits the module's Kotlin sources.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import BaseModel, Field, ValidationError

from ..core.config import Config, get_config
from ..core.exceptions import DescriptorError, DslGenError
from ..core.logging import bind_context, clear_context, get_logger, log_stage, setup_logging
from ..core.types import ServiceResult
from ..models.bytecode import AnnotationVocabulary, Nullability
from ..models.descriptor import AttrModel, ModuleModel, ViewModel
from ..services.codegen import CodegenInput, CodegenService
from ..services.nullability import ClassPath, NullabilityIndex
from ..services.resolver import ViewGraph, resolve_attributes
from ..storage import LocalStorageBackend

logger = get_logger(__name__)


class GenerationOutput(BaseModel):
    """Result of one generation run."""

    module: str = Field(description="Name of the primary module")
    views: int = Field(default=0, description="Views of the primary module")
    attributes: int = Field(default=0, description="Distinct attribute names dispatched")
    nullability_facts: int = Field(default=0)
    keys: list[str] = Field(default_factory=list, description="Written files, relative to the output directory")
    output_directory: str = ""


@dataclass
class ResolvedModule:
    """A primary module linked against its dependencies and resolved."""

    module: ModuleModel
    graph: ViewGraph
    resolved: dict[str, list[AttrModel]] = field(default_factory=dict)
    index: NullabilityIndex | None = None


def load_module(path: Path) -> ModuleModel:
    """Read and validate one descriptor file.

    Raises:
        DescriptorError: If the file cannot be read or is not a valid descriptor
    """
    try:
        raw = path.read_text(encoding="utf-8")
        return ModuleModel.model_validate_json(raw).backlink()
    except ValidationError as e:
        raise DescriptorError(
            message=f"{e.error_count()} validation error(s)",
            context={"errors": [err["loc"] for err in e.errors()]},
            cause=e,
            source=str(path),
        ) from e
    except OSError as e:
        raise DescriptorError(message="cannot read file", cause=e, source=str(path)) from e


def build_graph(primary: ModuleModel, dependencies: Iterable[ModuleModel]) -> ViewGraph:
    """Register dependencies before the primary module, then link super types."""
    graph = ViewGraph()
    for dependency in dependencies:
        graph.process_module(dependency, dependency=True)
    graph.process_module(primary)
    graph.finalize()
    return graph


def annotate_nullability(views: Iterable[ViewModel], index: NullabilityIndex) -> int:
    """Apply known parameter nullability to plain attribute types.

    Returns:
        Number of attribute types whose nullability came from bytecode
    """
    views = list(views)
    index.record_classes(view.name for view in views)

    annotated = 0
    for view in views:
        for attr in view.attrs:
            if attr.is_listener:
                continue
            nullable = index.is_parameter_nullable(view.name, attr.setter, attr.type.jvm_name)
            if nullable is None:
                continue
            attr.type.is_nullable = nullable
            annotated += 1
    return annotated


class GeneratorPipeline:
    """High-level pipeline interface for programmatic use."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def _index(self, class_path: Sequence[Path], recent_annotations: bool) -> NullabilityIndex | None:
        entries = [*class_path, *self.config.nullability.class_path]
        if not entries:
            return None
        if recent_annotations:
            vocabulary = AnnotationVocabulary.RECENT
        else:
            vocabulary = AnnotationVocabulary[self.config.nullability.vocabulary.upper()]
        return NullabilityIndex(vocabulary, ClassPath(entries))

    def resolve(
        self,
        model_file: Path,
        dependencies: Sequence[Path] = (),
        class_path: Sequence[Path] = (),
        recent_annotations: bool = False,
    ) -> ResolvedModule:
        """Load, link, annotate and resolve a module without emitting anything.

        Raises:
            DslGenError: On invalid descriptors or an inconsistent view graph
        """
        with log_stage(logger, "load", descriptors=len(dependencies) + 1):
            dependency_modules = [load_module(path) for path in dependencies]
            module = load_module(model_file)
        bind_context(module=module.name)

        with log_stage(logger, "link"):
            graph = build_graph(module, dependency_modules)

        index = self._index(class_path, recent_annotations)
        if index is not None:
            try:
                with log_stage(logger, "nullability", entries=len(index.class_path.entries)):
                    annotated = annotate_nullability(module.views, index)
            finally:
                index.class_path.close()
            logger.info("Nullability applied", facts=len(index), attributes=annotated)

        # Dependency views anchor super types only; their attributes belong to their own module
        with log_stage(logger, "resolve"):
            resolved = resolve_attributes(module.views)
        return ResolvedModule(module=module, graph=graph, resolved=resolved, index=index)

    async def run(
        self,
        model_file: Path,
        dependencies: Sequence[Path],
        output_dir: Path,
        class_path: Sequence[Path] = (),
        recent_annotations: bool = False,
    ) -> ServiceResult[GenerationOutput]:
        """Run the complete generation.

        Args:
            model_file: Primary module descriptor
            dependencies: Descriptors of modules the primary one builds on
            output_dir: Root directory of the generated sources
            class_path: Directories and jars scanned for nullability annotations
            recent_annotations: Match the ``Recently*`` annotation vocabulary

        Returns:
            ServiceResult containing GenerationOutput
        """
        start_time = time.perf_counter()
        logger.info("Starting generation", model=str(model_file), dependencies=len(dependencies))

        try:
            result = self.resolve(model_file, dependencies, class_path, recent_annotations)
            codegen = CodegenService(LocalStorageBackend(output_dir), self.config)
            codegen_result = await codegen.generate(
                CodegenInput(module=result.module, resolved=result.resolved)
            )
            if not codegen_result.success or codegen_result.data is None:
                return ServiceResult.fail(f"Code generation failed: {codegen_result.error}")

            output = GenerationOutput(
                module=result.module.name,
                views=len(result.module.views),
                attributes=len(result.resolved),
                nullability_facts=len(result.index) if result.index is not None else 0,
                keys=codegen_result.data.keys,
                output_directory=str(output_dir),
            )
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("Generation completed", files=len(output.keys), duration_ms=duration_ms)
            warnings = [f"duplicate view {name} ignored" for name in result.graph.ignored]
            if warnings:
                return ServiceResult.with_warnings(output, warnings, duration_ms=duration_ms)
            return ServiceResult.ok(output, duration_ms=duration_ms)

        except DslGenError as e:
            logger.error("Generation failed", error=str(e), error_type=type(e).__name__)
            return ServiceResult.fail(str(e), error_type=type(e).__name__)
        except OSError as e:
            logger.error("Generation failed", error=str(e))
            return ServiceResult.fail(str(e))
        finally:
            clear_context()


async def generate(
    model_file: str | Path,
    dependencies: Iterable[str | Path],
    output_dir: str | Path,
    class_path: Iterable[str | Path] = (),
    recent_annotations: bool = False,
    config: Config | None = None,
) -> ServiceResult[GenerationOutput]:
    """Convenience function to run the generator.

    Args:
        model_file: Primary module descriptor
        dependencies: Dependency module descriptors
        output_dir: Root directory of the generated sources
        class_path: Directories and jars scanned for nullability annotations
        recent_annotations: Match the ``Recently*`` annotation vocabulary
        config: Configuration, defaults to the environment configuration

    Returns:
        ServiceResult containing GenerationOutput
    """
    pipeline = GeneratorPipeline(config)
    return await pipeline.run(
        model_file=Path(model_file),
        dependencies=[Path(p) for p in dependencies],
        output_dir=Path(output_dir),
        class_path=[Path(p) for p in class_path],
        recent_annotations=recent_annotations,
    )


def generate_sync(
    model_file: str | Path,
    dependencies: Iterable[str | Path],
    output_dir: str | Path,
    class_path: Iterable[str | Path] = (),
    recent_annotations: bool = False,
    config: Config | None = None,
) -> ServiceResult[GenerationOutput]:
    """Blocking variant of :func:`generate` for build scripts."""
    setup_logging(config or get_config())
    return asyncio.run(
        generate(model_file, dependencies, output_dir, class_path, recent_annotations, config)
    )
