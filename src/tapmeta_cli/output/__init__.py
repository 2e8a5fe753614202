"""Output formatting and presentation layer for tapmeta."""

from .build_formatters import BuildExecutionFormatter
from .metadata_formatters import (
    OUTPUT_FORMATS,
    create_metadata_table,
    format_env,
    format_json,
    format_make_args,
    render_lines,
)

__all__ = [
    'BuildExecutionFormatter',
    'OUTPUT_FORMATS',
    'create_metadata_table',
    'format_env',
    'format_json',
    'format_make_args',
    'render_lines',
]
