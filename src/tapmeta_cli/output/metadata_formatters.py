"""Renderers for resolved build metadata."""

import json
import shlex
from typing import List

from rich.table import Table

from ..models.build_metadata import BuildMetadata


OUTPUT_FORMATS = ("table", "env", "make", "json")


def format_env(metadata: BuildMetadata) -> List[str]:
    """Shell ``export`` lines, suitable for ``eval``."""
    return [f"export {name}={shlex.quote(value)}" for name, value in metadata.as_env().items()]


def format_make_args(metadata: BuildMetadata) -> List[str]:
    """``NAME=value`` arguments for make-style build commands."""
    return [shlex.quote(f"{name}={value}") for name, value in metadata.as_env().items()]


def format_json(metadata: BuildMetadata) -> str:
    """JSON object keyed by the environment variable names."""
    return json.dumps(metadata.as_env(), indent=2)


def create_metadata_table(metadata: BuildMetadata, title: str = "Build Metadata") -> Table:
    """Rich table with one row per metadata value."""
    table = Table(title=f"📋 {title}", show_header=True, header_style="bold cyan")
    table.add_column("Variable", style="bold white")
    table.add_column("Value", style="cyan")
    for name, value in metadata.as_env().items():
        table.add_row(name, value)
    return table


def render_lines(metadata: BuildMetadata, output_format: str) -> List[str]:
    """Render metadata in a plain-text format.

    Raises:
        ValueError: If the format is not a plain-text one
    """
    if output_format == "env":
        return format_env(metadata)
    if output_format == "make":
        return [" ".join(format_make_args(metadata))]
    if output_format == "json":
        return [format_json(metadata)]
    raise ValueError(f"Unsupported output format: {output_format}")
