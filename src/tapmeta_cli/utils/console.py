"""Console utility functions for formatting and output."""

import click
from rich.console import Console
from rich.table import Table
from rich.theme import Theme


# Status symbols for consistent iconography
STATUS_SYMBOLS = {
    'success': '✨',
    'info': '💡',
    'warning': '⚠️',
    'error': '❌',
    'check': '✅',
    'list': '📋',
    'gear': '⚙️',
    'running': '🚀',
    'clock': '🕒',
    'tag': '🏷️',
}

CUSTOM_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim white",
    "title": "bold cyan",
})

_console = None
_err_console = None


def _get_console(stderr: bool = False) -> Console:
    """Get the shared Rich console, creating it on first use."""
    global _console, _err_console
    if stderr:
        if _err_console is None:
            _err_console = Console(theme=CUSTOM_THEME, stderr=True)
        return _err_console
    if _console is None:
        _console = Console(theme=CUSTOM_THEME)
    return _console


def _rich_echo(message: str, color: str = "white", style: str = None, bold: bool = False,
               symbol: str = None, err: bool = False):
    """Echo message with Rich formatting."""
    if style is not None:
        color = style

    if symbol and symbol in STATUS_SYMBOLS:
        message = f"{STATUS_SYMBOLS[symbol]} {message}"

    style_str = f"bold {color}" if bold else color
    # Diagnostics may contain brackets (git output); don't read them as markup
    _get_console(stderr=err).print(message, style=style_str, markup=False, highlight=False)


def _rich_success(message: str, symbol: str = None):
    """Display success message with green color and bold styling."""
    _rich_echo(message, color="green", symbol=symbol, bold=True, err=True)


def _rich_error(message: str, symbol: str = None):
    """Display error message with red color."""
    _rich_echo(message, color="red", symbol=symbol, err=True)


def _rich_warning(message: str, symbol: str = None):
    """Display warning message with yellow color."""
    _rich_echo(message, color="yellow", symbol=symbol, err=True)


def _rich_info(message: str, symbol: str = None):
    """Display info message with blue color."""
    _rich_echo(message, color="blue", symbol=symbol, err=True)


def _create_key_value_table(rows: list, title: str, key_header: str = "Key",
                            value_header: str = "Value") -> Table:
    """Create a two-column Rich table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column(key_header, style="bold white")
    table.add_column(value_header, style="cyan")

    for row in rows:
        if isinstance(row, (list, tuple)) and len(row) >= 2:
            table.add_row(str(row[0]), str(row[1]))
        else:
            table.add_row(str(row), "")

    return table


def _plain_echo(message: str = ""):
    """Write undecorated output to stdout, for machine-readable formats."""
    click.echo(message)
