"""
dslgen CLI.

Command-line interface for generating the Kotlin view DSL and inspecting its inputs.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import get_config
from .core.exceptions import DslGenError
from .core.logging import setup_logging

app = typer.Typer(
    name="dslgen",
    help="Generate a Kotlin view DSL from JSON view descriptors",
    add_completion=False,
)

console = Console()

_DEPENDENCY_OPTION = typer.Option(
    None,
    "--dependency",
    "-d",
    help="Descriptor of a module the primary module builds on (repeatable)",
    exists=True,
    dir_okay=False,
)
_CLASSPATH_OPTION = typer.Option(
    None,
    "--classpath",
    "-c",
    help="Directory or jar scanned for nullability annotations (repeatable)",
    exists=True,
)
_RECENT_OPTION = typer.Option(
    False,
    "--recent-annotations",
    help="Match RecentlyNullable/RecentlyNonNull, as found in SDK stub jars",
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"dslgen v{__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """dslgen: view descriptors to Kotlin DSL sources."""


@app.command()
def generate(
    model: Path = typer.Argument(
        ...,
        help="Descriptor of the module to generate",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    dependencies: Optional[List[Path]] = _DEPENDENCY_OPTION,
    output_dir: Path = typer.Option(
        Path("./generated"),
        "--output",
        "-o",
        help="Root directory of the generated sources",
    ),
    class_path: Optional[List[Path]] = _CLASSPATH_OPTION,
    recent_annotations: bool = _RECENT_OPTION,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Generate the dispatcher and per-view DSL files of a module."""
    cfg = get_config()
    if verbose:
        cfg = cfg.model_copy(update={"log_level": "DEBUG"})
    setup_logging(cfg)

    from .orchestration import generate as run_generation

    result = asyncio.run(run_generation(
        model_file=model,
        dependencies=dependencies or [],
        output_dir=output_dir,
        class_path=class_path or [],
        recent_annotations=recent_annotations,
        config=cfg,
    ))

    if not result.success or result.data is None:
        console.print("[bold red]✗ Generation failed![/bold red]")
        console.print(f"Error: {result.error}")
        raise typer.Exit(1)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    output = result.data
    if not output.keys:
        console.print(f"[yellow]Module {output.module} declares no views, nothing generated[/yellow]")
        return

    table = Table(title=f"Generated {output.module}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Views", str(output.views))
    table.add_row("Attributes", str(output.attributes))
    table.add_row("Nullability facts", str(output.nullability_facts))
    table.add_row("Files", str(len(output.keys)))
    table.add_row("Duration", f"{result.metadata.get('duration_ms', 0.0):.0f}ms")
    console.print(table)
    console.print(f"\n[bold]Output directory:[/bold] {output.output_directory}")


@app.command()
def inspect(
    model: Path = typer.Argument(
        ...,
        help="Descriptor of the module to inspect",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    dependencies: Optional[List[Path]] = _DEPENDENCY_OPTION,
) -> None:
    """Show the resolved dispatch table of a module without writing files."""
    cfg = get_config()
    setup_logging(cfg)

    from .orchestration import GeneratorPipeline
    from .services.codegen import DispatchTable

    try:
        resolved = GeneratorPipeline(cfg).resolve(model, dependencies or [])
    except DslGenError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    module = resolved.module
    console.print(Panel.fit(
        f"[bold blue]{module.name}[/bold blue]\n"
        f"{module.module_package} · {len(module.views)} views · {len(resolved.graph)} views in graph",
        border_style="blue",
    ))

    table = Table(title="Dispatch table")
    table.add_column("Attribute", style="cyan")
    table.add_column("Owner")
    table.add_column("Value type", style="green")
    table.add_column("Kind", style="dim")
    for name, branch in DispatchTable.build(resolved.resolved).branches():
        value_type = branch.value_type.parametrized + ("?" if branch.attr.is_nullable else "")
        table.add_row(name, branch.owner.name, value_type, branch.kind.value)
    console.print(table)


@app.command()
def nullability(
    classes: List[str] = typer.Argument(..., help="Classes to scan, e.g. android.widget.TextView"),
    class_path: Optional[List[Path]] = _CLASSPATH_OPTION,
    recent_annotations: bool = _RECENT_OPTION,
) -> None:
    """Print the parameter nullability recorded for the given classes."""
    cfg = get_config()
    setup_logging(cfg)

    from .models.bytecode import AnnotationVocabulary
    from .services.nullability import ClassPath, NullabilityIndex

    entries = [*(class_path or []), *cfg.nullability.class_path]
    if not entries:
        console.print("[red]No class path given (use --classpath or DSLGEN_CLASSPATH)[/red]")
        raise typer.Exit(1)

    vocabulary = (
        AnnotationVocabulary.RECENT
        if recent_annotations
        else AnnotationVocabulary[cfg.nullability.vocabulary.upper()]
    )
    index = NullabilityIndex(vocabulary, ClassPath(entries))
    try:
        index.record_classes(classes)
    finally:
        index.class_path.close()

    table = Table(title=f"Nullability ({vocabulary.name.lower()} annotations)")
    table.add_column("Class", style="cyan")
    table.add_column("Method")
    table.add_column("Parameter type")
    table.add_column("Nullability", style="green")
    for signature, value in index.facts():
        table.add_row(signature.class_name, signature.method_name, signature.first_arg_type, value.value)
    console.print(table)


@app.command()
def config() -> None:
    """Show the active configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Log Format", cfg.log_format)
    table.add_row("Runtime Package", cfg.runtime.package)
    table.add_row("Runtime Entry", cfg.runtime.entry_type)
    table.add_row("Root Scope", cfg.runtime.root_view_scope)
    table.add_row("Nullability Vocabulary", cfg.nullability.vocabulary)
    table.add_row("Class Path", ", ".join(str(p) for p in cfg.nullability.class_path) or "-")
    table.add_row("Indent", repr(cfg.output.indent))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  DSLGEN_LOG_LEVEL, DSLGEN_LOG_FORMAT, DSLGEN_RUNTIME_PACKAGE")
    console.print("  DSLGEN_NULLABILITY_VOCABULARY, DSLGEN_CLASSPATH")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
