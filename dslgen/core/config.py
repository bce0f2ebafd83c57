"""
Configuration management for dslgen.

Provides centralized, type-safe configuration with environment variable overrides
and defaults matching the Inkremental runtime the generated DSL targets.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


class RuntimeConfig(BaseModel):
    """Names of the runtime symbols referenced by generated code."""

    package: str = Field(default="dev.inkremental", description="Runtime package")
    entry_object: str = Field(default="Inkremental", description="Runtime entry object")
    root_view_scope: str = Field(default="RootViewScope", description="Scope of root views")
    view_class: str = Field(default="android.view.View", description="Base view class")
    dip_class: str = Field(
        default="dev.inkremental.dsl.android.Dip",
        description="Value class accepted by pixel-to-dip transformed attributes",
    )
    requires_api_annotation: str = Field(
        default="androidx.annotation.RequiresApi",
        description="Annotation attached by the RequiresApi21 transformer",
    )
    build_version_codes: str = Field(
        default="android.os.Build.VERSION_CODES",
        description="Holder of platform version constants",
    )

    @property
    def entry_type(self) -> str:
        """Fully-qualified name of the runtime entry object."""
        return f"{self.package}.{self.entry_object}"

    def member(self, name: str) -> str:
        """Fully-qualified name of a top-level runtime function."""
        return f"{self.package}.{name}"


class NullabilityConfig(BaseModel):
    """Bytecode nullability scanning configuration."""

    vocabulary: Literal["stable", "recent"] = Field(
        default="stable", description="Annotation vocabulary to match"
    )
    class_path: list[Path] = Field(
        default_factory=list, description="Directories and jars scanned for class files"
    )


class OutputConfig(BaseModel):
    """Generated source layout."""

    indent: str = Field(default="  ", description="Indentation unit of generated code")
    suppressed_warnings: list[str] = Field(
        default_factory=lambda: [
            "DEPRECATION",
            "UNCHECKED_CAST",
            "MemberVisibilityCanBePrivate",
            "unused",
        ],
        description="Warnings suppressed at file level",
    )


class Config(BaseModel):
    """Root configuration for dslgen."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto", description="Console on a terminal, JSON lines otherwise when auto"
    )
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    nullability: NullabilityConfig = Field(default_factory=NullabilityConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        class_path = os.environ.get("DSLGEN_CLASSPATH", "")
        return cls(
            log_level=os.environ.get("DSLGEN_LOG_LEVEL", "INFO"),  # type: ignore
            log_format=os.environ.get("DSLGEN_LOG_FORMAT", "auto"),  # type: ignore
            runtime=RuntimeConfig(
                package=os.environ.get("DSLGEN_RUNTIME_PACKAGE", "dev.inkremental"),
            ),
            nullability=NullabilityConfig(
                vocabulary=os.environ.get("DSLGEN_NULLABILITY_VOCABULARY", "stable"),  # type: ignore
                class_path=[Path(p) for p in class_path.split(os.pathsep) if p],
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
