"""Version management for tapmeta."""

import re
from importlib import metadata
from pathlib import Path

# Build-time version constant (injected when packaging a standalone binary)
__BUILD_VERSION__ = None


def get_version() -> str:
    """
    Get the current version.

    Tries the build-time constant, then installed package metadata, then
    pyproject.toml of a source checkout.

    Returns:
        str: Version string
    """
    if __BUILD_VERSION__:
        return __BUILD_VERSION__

    try:
        return metadata.version("tapmeta")
    except metadata.PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        content = pyproject_path.read_text(encoding='utf-8')
        match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE)
        if match:
            return match.group(1)

    return "unknown"


__version__ = get_version()
