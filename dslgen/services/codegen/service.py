"""
Code Generation Service.

Renders the Kotlin DSL sources of one module from its resolved attributes and
writes them through the storage backend.
"""

from __future__ import annotations

import asyncio
import time

from pydantic import BaseModel, Field

from ... import __version__
from ...core.config import Config, get_config
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.descriptor import AttrModel, ModuleModel
from ...storage import StorageBackend
from .dispatch import DispatcherRenderer, DispatchTable
from .kotlin import GeneratedFile
from .scope import ScopeRenderer

logger = get_logger(__name__)


class CodegenInput(BaseModel):
    """Input for code generation."""

    module: ModuleModel
    resolved: dict[str, list[AttrModel]] = Field(description="Attribute name to surviving candidates")


class CodegenOutput(BaseModel):
    """Output from code generation."""

    keys: list[str] = Field(default_factory=list, description="Storage keys of written files")
    dispatcher_key: str | None = Field(default=None)
    branches: int = Field(default=0, description="Number of dispatch branches emitted")


class CodegenService:
    """Service for generating the DSL sources of a module.

    Rendering is pure; only ``generate`` touches storage.
    """

    def __init__(self, storage: StorageBackend, config: Config | None = None) -> None:
        self.storage = storage
        self.config = config or get_config()
        self.generator = f"dslgen {__version__}"
        self.dispatcher = DispatcherRenderer(self.config.runtime, self.config.output, self.generator)
        self.scopes = ScopeRenderer(self.config.runtime, self.config.output)

    def render_module(self, module: ModuleModel, resolved: dict[str, list[AttrModel]]) -> list[GeneratedFile]:
        """Render every file of a module, dispatcher first.

        A module without views produces nothing, not even the dispatcher.
        """
        if not module.views:
            return []
        files = [self.dispatcher.render(module, DispatchTable.build(resolved))]
        for view in sorted(module.views, key=lambda v: v.name):
            files.append(self.scopes.render(module, view))
        return files

    async def write_files(self, files: list[GeneratedFile]) -> list[str]:
        """Write rendered files; per-view files are written concurrently."""
        if not files:
            return []
        dispatcher, *views = files
        keys = [await self.storage.store_text(dispatcher.key, dispatcher.content)]
        keys += await asyncio.gather(*(self.storage.store_text(f.key, f.content) for f in views))
        return keys

    async def generate(self, input_data: CodegenInput) -> ServiceResult[CodegenOutput]:
        """Render and store the sources of one module.

        Args:
            input_data: Module plus its resolved attributes

        Returns:
            ServiceResult containing CodegenOutput
        """
        start_time = time.perf_counter()
        module = input_data.module

        try:
            files = self.render_module(module, input_data.resolved)
            if not files:
                logger.info("Module has no views, nothing generated", module=module.name)
                return ServiceResult.ok(CodegenOutput())

            keys = await self.write_files(files)
            branches = sum(len(attrs) for attrs in input_data.resolved.values())
            output = CodegenOutput(keys=keys, dispatcher_key=keys[0], branches=branches)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "DSL sources generated",
                module=module.name,
                files=len(keys),
                attributes=len(input_data.resolved),
                branches=branches,
                duration_ms=duration_ms,
            )
            return ServiceResult.ok(output, duration_ms=duration_ms)

        except OSError as e:
            logger.error("Writing generated sources failed", module=module.name, error=str(e))
            return ServiceResult.fail(str(e))
