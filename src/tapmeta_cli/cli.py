"""Command-line interface for tapmeta."""

import sys
from pathlib import Path
from typing import Optional

import click
from colorama import init, Fore, Style

from tapmeta_cli import config as settings
from tapmeta_cli.config import (
    get_config, update_config, get_default_toolchain, get_formula_dir, get_timestamp_source,
)
from tapmeta_cli.core.build_runner import BuildRunner
from tapmeta_cli.core.git_history import GitHistory
from tapmeta_cli.core.resolver import BuildMetadataResolver
from tapmeta_cli.factory import ToolchainFactory
from tapmeta_cli.models.build_metadata import BuildMetadata, BuildMode, HostPlatform, MetadataUnavailable
from tapmeta_cli.models.formula import Formula, load_formula
from tapmeta_cli.output.metadata_formatters import OUTPUT_FORMATS, create_metadata_table, render_lines
from tapmeta_cli.utils.console import (
    _rich_success, _rich_error, _rich_info, _get_console,
    _create_key_value_table, _plain_echo,
)
from tapmeta_cli.version import get_version
from tapmeta_cli.commands.formula import formula

# Initialize colorama for the top-level error handler
init(autoreset=True)

ERROR = f"{Fore.RED}{Style.BRIGHT}"
RESET = Style.RESET_ALL


def print_version(ctx, param, value):
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"tapmeta version {get_version()}")
    ctx.exit()


@click.group(help="tapmeta: reproducible build metadata for formula builds")
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True, help="Show version and exit.")
@click.option('--formula-dir', type=click.Path(file_okay=False),
              help="Directory containing formula files (default from config)")
@click.pass_context
def cli(ctx, formula_dir):
    """Main entry point for the tapmeta CLI."""
    ctx.ensure_object(dict)
    ctx.obj['formula_dir'] = formula_dir


cli.add_command(formula)


def _load_formula_from_context(ctx, name: Optional[str]) -> Optional[Formula]:
    if not name:
        return None
    formula_dir = Path(ctx.obj.get('formula_dir') or get_formula_dir())
    return load_formula(name, formula_dir)


def _select_mode(item: Optional[Formula], head: bool, tag: Optional[str]) -> BuildMode:
    """Pick the build mode from flags and what the formula declares."""
    if head:
        return BuildMode.DEVELOPMENT
    if tag or item is None or item.has_stable:
        return BuildMode.RELEASE
    if item.has_head:
        # Head-only formula, like a tap entry with no stable url
        return BuildMode.DEVELOPMENT
    raise ValueError(f"Formula '{item.name}' declares neither a release tag nor a head branch")


def _resolve_metadata(item: Optional[Formula], mode: BuildMode, tag: Optional[str],
                      revision: Optional[str], branch: Optional[str], repo: str,
                      toolchain_name: Optional[str], host: Optional[str]) -> BuildMetadata:
    """Resolve metadata, letting explicit options override the formula."""
    if mode == BuildMode.RELEASE:
        stable = item.stable if item else None
        ref = tag or (stable.tag if stable else None)
        pinned = revision or (stable.revision if stable else None)
    else:
        ref = branch
        pinned = None

    toolchain_name = toolchain_name or (item.build.toolchain if item else None) or get_default_toolchain()
    toolchain = ToolchainFactory.create_toolchain(toolchain_name)
    host_platform = HostPlatform.parse(host) if host else None

    resolver = BuildMetadataResolver(
        GitHistory(repo),
        toolchain=toolchain,
        timestamp_source=get_timestamp_source(),
    )
    return resolver.resolve(mode, ref, pinned_revision=pinned, host_platform=host_platform)


@cli.command(help="Resolve build metadata (BUILD_ID, BUILD_TIME, BUILD_HOST)")
@click.argument('formula_name', required=False)
@click.option('--head', is_flag=True, help="Development build from the tracked branch head")
@click.option('--tag', help="Release tag (overrides the formula)")
@click.option('--revision', help="Pinned release commit hash (overrides the formula)")
@click.option('--branch', help="Reference to resolve for development builds (default: HEAD)")
@click.option('--repo', default=".", show_default=True, type=click.Path(),
              help="Path to the source checkout")
@click.option('--toolchain', 'toolchain_name',
              type=click.Choice(sorted(ToolchainFactory.TOOLCHAINS)),
              help="Toolchain queried for the build host")
@click.option('--host', help="Explicit build host as os/arch")
@click.option('--format', 'output_format', type=click.Choice(OUTPUT_FORMATS),
              default="table", show_default=True, help="Output format")
@click.pass_context
def resolve(ctx, formula_name, head, tag, revision, branch, repo, toolchain_name, host, output_format):
    """Resolve and print build metadata for a formula or explicit reference."""
    try:
        item = _load_formula_from_context(ctx, formula_name)
        mode = _select_mode(item, head, tag)
        metadata = _resolve_metadata(item, mode, tag, revision, branch, repo, toolchain_name, host)
    except MetadataUnavailable as e:
        _rich_error(f"Build metadata unavailable: {e}", symbol="error")
        sys.exit(1)
    except (ValueError, FileNotFoundError) as e:
        _rich_error(str(e), symbol="error")
        sys.exit(1)

    if output_format == "table":
        title = f"{item.name} ({mode.value})" if item else f"Build Metadata ({mode.value})"
        _get_console().print(create_metadata_table(metadata, title=title))
        return

    for line in render_lines(metadata, output_format):
        _plain_echo(line)


@cli.command(help="Resolve build metadata and run a formula's build command")
@click.argument('formula_name')
@click.option('--head', is_flag=True, help="Development build from the tracked branch head")
@click.option('--branch', help="Reference to resolve for development builds (default: HEAD)")
@click.option('--repo', default=".", show_default=True, type=click.Path(),
              help="Path to the source checkout; the build runs there")
@click.option('--toolchain', 'toolchain_name',
              type=click.Choice(sorted(ToolchainFactory.TOOLCHAINS)),
              help="Toolchain queried for the build host")
@click.option('--host', help="Explicit build host as os/arch")
@click.option('--dry-run', is_flag=True, help="Show the build command without running it")
@click.pass_context
def build(ctx, formula_name, head, branch, repo, toolchain_name, host, dry_run):
    """Build a formula with BUILD_ID, BUILD_TIME and BUILD_HOST injected."""
    try:
        item = _load_formula_from_context(ctx, formula_name)
        mode = _select_mode(item, head, None)
        metadata = _resolve_metadata(item, mode, None, None, branch, repo, toolchain_name, host)
        BuildRunner().run_build(item, metadata, mode, cwd=repo, dry_run=dry_run)
    except MetadataUnavailable as e:
        _rich_error(f"Build aborted, metadata unavailable: {e}", symbol="error")
        sys.exit(1)
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        _rich_error(str(e), symbol="error")
        sys.exit(1)


@cli.command(help="Configure tapmeta")
@click.option('--show', is_flag=True, help="Show current configuration")
@click.option('--set', 'assignments', multiple=True, metavar="KEY=VALUE",
              help="Set a configuration value")
@click.pass_context
def config(ctx, show, assignments):
    """Show or update tapmeta settings."""
    try:
        if assignments:
            updates = {}
            for assignment in assignments:
                if '=' not in assignment:
                    raise ValueError(f"Invalid assignment '{assignment}'. Use KEY=VALUE")
                key, value = assignment.split('=', 1)
                updates[key.strip()] = value.strip()
            update_config(updates)
            for key, value in updates.items():
                _rich_success(f"Set {key} = {value}", symbol="check")

        if show:
            rows = sorted(get_config().items())
            rows.append(("config file", settings.CONFIG_FILE))
            rows.append(("tapmeta version", get_version()))
            _get_console().print(_create_key_value_table(rows, title="⚙️  Current Configuration",
                                                         key_header="Setting"))
        elif not assignments:
            _rich_info("Use --show to display configuration or --set KEY=VALUE to change it")
    except ValueError as e:
        _rich_error(f"Error updating configuration: {e}", symbol="error")
        sys.exit(1)


def main():
    """Main entry point for the CLI."""
    try:
        cli(obj={})
    except Exception as e:
        click.echo(f"{ERROR}Error: {e}{RESET}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
