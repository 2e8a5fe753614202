"""Helper utility functions for tapmeta."""

import platform
import shutil
import subprocess
import sys


# platform.machine() spellings mapped to Go's GOARCH names
ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def is_tool_available(tool_name):
    """Check if a command-line tool is available.

    Args:
        tool_name (str): Name of the tool to check.

    Returns:
        bool: True if the tool is available, False otherwise.
    """
    if shutil.which(tool_name):
        return True

    try:
        if sys.platform == 'win32':
            result = subprocess.run(['where', tool_name],
                                    stdout=subprocess.PIPE,
                                    stderr=subprocess.PIPE,
                                    shell=False,
                                    check=False)
        else:
            result = subprocess.run(['which', tool_name],
                                    stdout=subprocess.PIPE,
                                    stderr=subprocess.PIPE,
                                    check=False)
        return result.returncode == 0
    except OSError:
        return False


def detect_platform():
    """Detect the native OS using Go's GOOS names.

    Returns:
        str: darwin, linux, windows, or the lowercased system name.
    """
    system = platform.system().lower()
    if system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    return system or "unknown"


def detect_arch():
    """Detect the native architecture using Go's GOARCH names."""
    machine = platform.machine().lower()
    return ARCH_ALIASES.get(machine, machine or "unknown")
