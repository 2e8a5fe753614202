"""Toolchain platform queries.

A build's host descriptor is taken from the toolchain that performs the
build, not from the machine running tapmeta. ``go env`` honours ``GOOS`` and
``GOARCH`` from the environment, so a cross-compiling build reports its
target rather than the native platform.
"""

import os
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models.build_metadata import HostPlatform
from ..utils.console import _rich_warning
from ..utils.helpers import is_tool_available, detect_platform, detect_arch


class ToolchainUnavailable(Exception):
    """Raised when a toolchain cannot report its target platform."""


class Toolchain(ABC):
    """Base interface for toolchain platform queries."""

    name = "toolchain"

    @abstractmethod
    def target_platform(self) -> HostPlatform:
        """Get the OS/architecture the toolchain builds for."""
        pass


class CommandToolchain(Toolchain):
    """Toolchain queried through its own executable."""

    executable = ""

    def __init__(self, env: Optional[Dict[str, str]] = None):
        """Initialize the toolchain query.

        Args:
            env: Environment for the query (defaults to os.environ)
        """
        self.env = env

    @abstractmethod
    def query_args(self) -> List[str]:
        """Arguments passed to the executable."""
        pass

    @abstractmethod
    def parse_output(self, output: str) -> HostPlatform:
        """Turn the query output into a HostPlatform."""
        pass

    def target_platform(self) -> HostPlatform:
        if not is_tool_available(self.executable):
            raise ToolchainUnavailable(f"'{self.executable}' not found on PATH")

        env = self.env if self.env is not None else os.environ.copy()
        try:
            result = subprocess.run(
                [self.executable] + self.query_args(),
                capture_output=True,
                text=True,
                check=True,
                env=env,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise ToolchainUnavailable(
                f"'{self.executable}' exited with code {e.returncode}: {stderr}"
            )
        except OSError as e:
            raise ToolchainUnavailable(f"Could not run '{self.executable}': {e}")

        try:
            return self.parse_output(result.stdout)
        except ValueError as e:
            raise ToolchainUnavailable(f"Unexpected output from '{self.executable}': {e}")


class GoToolchain(CommandToolchain):
    """Go toolchain; reports GOOS/GOARCH."""

    name = "go"
    executable = "go"

    def query_args(self) -> List[str]:
        return ["env", "GOOS", "GOARCH"]

    def parse_output(self, output: str) -> HostPlatform:
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if len(lines) != 2:
            raise ValueError(f"expected GOOS and GOARCH, got {output!r}")
        return HostPlatform(os=lines[0], arch=lines[1])


class NodeToolchain(CommandToolchain):
    """Node.js toolchain; reports process.platform/process.arch."""

    name = "node"
    executable = "node"

    def query_args(self) -> List[str]:
        return ["-p", "process.platform + '/' + process.arch"]

    def parse_output(self, output: str) -> HostPlatform:
        return HostPlatform.parse(output)


class NativePlatform(Toolchain):
    """The platform tapmeta itself runs on, in Go naming."""

    name = "native"

    def target_platform(self) -> HostPlatform:
        return HostPlatform(os=detect_platform(), arch=detect_arch())


def resolve_host_platform(toolchain: Toolchain) -> HostPlatform:
    """Get the toolchain's target platform, falling back to the native one."""
    try:
        return toolchain.target_platform()
    except ToolchainUnavailable as e:
        native = NativePlatform().target_platform()
        _rich_warning(
            f"Toolchain '{toolchain.name}' unavailable ({e}); using native platform {native}",
            symbol="warning"
        )
        return native
