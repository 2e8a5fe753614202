"""Runs a formula's external build command with build metadata injected."""

import os
import shlex
import string
import subprocess
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..models.build_metadata import BuildMetadata, BuildMode
from ..models.formula import Formula
from ..output.build_formatters import BuildExecutionFormatter


PLACEHOLDERS = ("build_id", "build_time", "build_host", "version", "tag", "revision")


class BuildRunner:
    """Executes the build command declared by a formula."""

    def __init__(self, use_color: bool = True):
        """Initialize build runner.

        Args:
            use_color: Whether to use colored output
        """
        self.formatter = BuildExecutionFormatter(use_color=use_color)

    def template_values(self, formula: Formula, metadata: BuildMetadata,
                        mode: BuildMode) -> Dict[str, str]:
        """Values available to ``{placeholder}`` substitution in a command."""
        values = {
            "build_id": metadata.build_id,
            "build_time": metadata.build_time,
            "build_host": metadata.build_host,
        }
        if mode == BuildMode.RELEASE and formula.stable:
            values["version"] = formula.version or metadata.build_id
            values["tag"] = formula.stable.tag or ""
            values["revision"] = formula.stable.revision or ""
        else:
            values["version"] = metadata.build_id
            values["tag"] = "HEAD"
            values["revision"] = metadata.build_id
        return values

    def render_command(self, command: str, values: Dict[str, str]) -> List[str]:
        """Substitute placeholders and split the command into arguments.

        Raises:
            ValueError: If the command uses an unknown placeholder or is empty
        """
        for _, field_name, _, _ in string.Formatter().parse(command):
            if field_name is not None and field_name not in values:
                raise ValueError(
                    f"Unknown placeholder '{{{field_name}}}' in build command. "
                    f"Available: {', '.join(PLACEHOLDERS)}"
                )

        argv = shlex.split(command.format(**values))
        if not argv:
            raise ValueError("Build command is empty")
        return argv

    def run_build(self, formula: Formula, metadata: BuildMetadata, mode: BuildMode,
                  cwd: Union[str, Path] = ".", dry_run: bool = False,
                  env: Optional[Dict[str, str]] = None) -> bool:
        """Run the formula's build command.

        Args:
            formula: Formula whose build command is executed
            metadata: Resolved metadata exported as BUILD_ID/BUILD_TIME/BUILD_HOST
            mode: Build mode, used for tag/revision/version placeholders
            cwd: Directory the command runs in (the source checkout)
            dry_run: Print the command instead of running it
            env: Base environment (defaults to os.environ)

        Returns:
            bool: True if the build succeeded

        Raises:
            ValueError: If the formula has no usable build command
            RuntimeError: If the build command fails
        """
        if not formula.build.command:
            raise ValueError(f"Formula '{formula.name}' has no build command")

        argv = self.render_command(formula.build.command,
                                   self.template_values(formula, metadata, mode))

        for line in self.formatter.format_build_header(formula.name, mode.value, metadata):
            print(line)

        if dry_run:
            for line in self.formatter.format_dry_run(argv, metadata.as_env()):
                print(line)
            return True

        build_env = dict(env if env is not None else os.environ)
        build_env.update(metadata.as_env())

        for line in self.formatter.format_command(argv, str(cwd)):
            print(line)

        start_time = time.time()
        try:
            subprocess.run(argv, cwd=str(cwd), env=build_env, check=True)
        except subprocess.CalledProcessError as e:
            for line in self.formatter.format_build_error(formula.name, e.returncode):
                print(line)
            raise RuntimeError(f"Build of '{formula.name}' failed with exit code {e.returncode}")
        except FileNotFoundError:
            raise RuntimeError(f"Build command not found: {argv[0]}")

        execution_time = time.time() - start_time
        for line in self.formatter.format_build_success(formula.name, execution_time):
            print(line)
        return True
