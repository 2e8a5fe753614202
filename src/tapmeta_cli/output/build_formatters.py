"""CLI output formatters for build execution."""

from typing import Dict, List

from rich.console import Console
from rich.text import Text

from ..models.build_metadata import BuildMetadata


class BuildExecutionFormatter:
    """Formats the progress lines printed around an external build."""

    def __init__(self, use_color: bool = True):
        """Initialize formatter.

        Args:
            use_color: Whether to use colors and rich formatting.
        """
        self.use_color = use_color
        self.console = Console() if self.use_color else None

    def format_build_header(self, formula_name: str, mode: str, metadata: BuildMetadata) -> List[str]:
        """Format the build header with the resolved metadata.

        Args:
            formula_name: Name of the formula being built
            mode: Build mode label (release/development)
            metadata: Metadata injected into the build

        Returns:
            List of formatted lines
        """
        lines = [self._styled(f"🚀 Building {formula_name} ({mode})", "cyan bold")]

        env = metadata.as_env()
        names = list(env)
        for index, name in enumerate(names):
            branch = "└─" if index == len(names) - 1 else "├─"
            lines.append(self._styled(f"{branch} {name}={env[name]}", "dim"))

        return lines

    def format_command(self, argv: List[str], cwd: str) -> List[str]:
        """Format the command about to run."""
        return [
            self._styled("Executing build command...", "white bold"),
            self._styled(f"├─ Command: {' '.join(argv)}", "dim"),
            self._styled(f"└─ Directory: {cwd}", "dim"),
        ]

    def format_dry_run(self, argv: List[str], env: Dict[str, str]) -> List[str]:
        """Format what a dry run would have executed."""
        lines = [self._styled("Dry run, build command not executed:", "yellow bold")]
        lines.append(self._styled(f"  {' '.join(argv)}", "dim"))
        for name, value in env.items():
            lines.append(self._styled(f"  {name}={value}", "dim"))
        return lines

    def format_build_success(self, formula_name: str, execution_time: float) -> List[str]:
        """Format the build success message."""
        return [self._styled(f"✅ {formula_name} built successfully ({execution_time:.2f}s)", "green bold")]

    def format_build_error(self, formula_name: str, exit_code: int) -> List[str]:
        """Format the build failure message."""
        return [self._styled(f"✗ {formula_name} build failed with exit code {exit_code}", "red bold")]

    def _styled(self, text: str, style: str) -> str:
        """Apply styling to text when color is enabled."""
        if not self.use_color or not self.console:
            return text
        styled_text = Text(text)
        styled_text.style = style
        with self.console.capture() as capture:
            self.console.print(styled_text, end="")
        return capture.get()
