"""Formula inspection commands."""

import sys
from pathlib import Path

import click
from rich.table import Table

from ..config import get_formula_dir
from ..models.formula import Formula, find_formulae, load_formula
from ..utils.console import (
    _rich_error, _rich_info, _rich_warning, _get_console, _create_key_value_table
)


def _formula_dir_from_context(ctx) -> Path:
    obj = ctx.obj or {}
    return Path(obj.get('formula_dir') or get_formula_dir())


@click.group(help="📋 Inspect formulae in the tap")
def formula():
    """Formula inspection commands."""
    pass


@formula.command(name="list", help="📋 List formulae")
@click.pass_context
def list_formulae(ctx):
    """Show all formulae with their release and head sources."""
    formula_dir = _formula_dir_from_context(ctx)

    paths = find_formulae(formula_dir)
    if not paths:
        _rich_info(f"No formulae found in {formula_dir}", symbol="info")
        return

    table = Table(title="📋 Formulae", show_header=True, header_style="bold cyan")
    table.add_column("Formula", style="bold white")
    table.add_column("Version", style="yellow")
    table.add_column("Tag", style="blue")
    table.add_column("Head", style="magenta")
    table.add_column("Toolchain", style="green")

    failures = 0
    for path in paths:
        try:
            item = Formula.from_yml(path)
        except (ValueError, FileNotFoundError) as e:
            _rich_warning(f"Skipping {path.name}: {e}", symbol="warning")
            failures += 1
            continue
        table.add_row(
            item.name,
            item.version or "-",
            item.stable.tag if item.has_stable else "-",
            item.head.branch if item.has_head else "-",
            item.build.toolchain or "-",
        )

    _get_console().print(table)
    if failures:
        sys.exit(1)


@formula.command(help="🔍 Show a formula's details")
@click.argument('name')
@click.pass_context
def show(ctx, name):
    """Display the sources and build command of a single formula."""
    try:
        item = load_formula(name, _formula_dir_from_context(ctx))
    except (ValueError, FileNotFoundError) as e:
        _rich_error(str(e), symbol="error")
        sys.exit(1)

    rows = [
        ("Name", item.name),
        ("Description", item.desc or "-"),
        ("Homepage", item.homepage or "-"),
        ("License", item.license or "-"),
    ]
    if item.stable:
        rows.extend([
            ("URL", item.stable.url),
            ("Tag", item.stable.tag or "-"),
            ("Revision", item.stable.revision or "-"),
            ("Version", item.version or "-"),
        ])
    if item.head:
        rows.extend([
            ("Head URL", item.head.url),
            ("Head branch", item.head.branch),
        ])
    if item.livecheck_regex:
        rows.append(("Livecheck", item.livecheck_regex))
    rows.extend([
        ("Toolchain", item.build.toolchain or "(default)"),
        ("Build command", item.build.command or "-"),
    ])

    _get_console().print(_create_key_value_table(rows, title=f"📋 {item.name}",
                                                 key_header="Field"))
