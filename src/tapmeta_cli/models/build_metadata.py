"""Build metadata data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict


BUILD_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class MetadataUnavailable(Exception):
    """Raised when the commit timestamp for a reference cannot be resolved."""


class BuildMode(Enum):
    """Build modes supported by the resolver."""
    RELEASE = "release"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class HostPlatform:
    """An OS/architecture pair as reported by a toolchain."""
    os: str
    arch: str

    @classmethod
    def parse(cls, value: str) -> "HostPlatform":
        """Parse an ``os/arch`` string.

        Raises:
            ValueError: If the string is not in ``os/arch`` form
        """
        parts = value.strip().split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid host platform '{value}'. Expected 'os/arch'")
        return cls(os=parts[0], arch=parts[1])

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@dataclass(frozen=True)
class BuildMetadata:
    """Metadata handed to an external build command."""
    build_id: str
    build_time: str
    build_host: str

    def as_env(self) -> Dict[str, str]:
        """Get the metadata as build environment variables."""
        return {
            "BUILD_ID": self.build_id,
            "BUILD_TIME": self.build_time,
            "BUILD_HOST": self.build_host,
        }


def format_build_time(moment: datetime) -> str:
    """Normalize a timezone-aware datetime to a UTC ``...Z`` timestamp.

    Args:
        moment: Timezone-aware datetime with any offset

    Returns:
        str: ISO-8601 timestamp in UTC with a trailing ``Z``

    Raises:
        ValueError: If ``moment`` carries no timezone information
    """
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError("Build time must be timezone-aware")
    return moment.astimezone(timezone.utc).strftime(BUILD_TIME_FORMAT)
