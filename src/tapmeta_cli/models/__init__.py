"""Models for tapmeta data structures."""

from .build_metadata import (
    BuildMetadata,
    BuildMode,
    HostPlatform,
    MetadataUnavailable,
    format_build_time,
)
from .formula import (
    Formula,
    SourceSpec,
    HeadSpec,
    BuildSpec,
    find_formulae,
    is_commit_hash,
    load_formula,
    strip_version_prefix,
)

__all__ = [
    "BuildMetadata",
    "BuildMode",
    "HostPlatform",
    "MetadataUnavailable",
    "format_build_time",
    "Formula",
    "SourceSpec",
    "HeadSpec",
    "BuildSpec",
    "find_formulae",
    "is_commit_hash",
    "load_formula",
    "strip_version_prefix",
]
