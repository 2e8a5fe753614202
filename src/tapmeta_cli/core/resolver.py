"""Build metadata resolution.

Release builds take everything from the pinned (tag, revision) pair, so two
builds of the same release produce identical metadata. Development builds
take it from the commit the tracked branch currently points at.
"""

from typing import Optional

from .git_history import GitHistory, SHORT_HASH_LENGTH
from .toolchain import Toolchain, NativePlatform, resolve_host_platform
from ..models.build_metadata import (
    BuildMetadata,
    BuildMode,
    HostPlatform,
    MetadataUnavailable,
    format_build_time,
)
from ..models.formula import is_commit_hash, strip_version_prefix


HEAD_REF = "HEAD"
HEAD_BUILD_ID = "head"


class BuildMetadataResolver:
    """Derives BuildMetadata from repository state and a toolchain."""

    def __init__(self, history: GitHistory, toolchain: Optional[Toolchain] = None,
                 timestamp_source: str = 'committer'):
        """Initialize the resolver.

        Args:
            history: Version-control query interface
            toolchain: Toolchain queried for the build host (native if None)
            timestamp_source: ``committer`` or ``author`` commit timestamp
        """
        self.history = history
        self.toolchain = toolchain or NativePlatform()
        self.timestamp_source = timestamp_source

    def resolve(self, mode: BuildMode, tag_or_ref: Optional[str] = None,
                pinned_revision: Optional[str] = None,
                host_platform: Optional[HostPlatform] = None) -> BuildMetadata:
        """Resolve build metadata.

        Args:
            mode: Release or development build
            tag_or_ref: Release tag, or the tracked branch for development builds
            pinned_revision: Commit pinned by the release (release mode only)
            host_platform: Explicit host; queried from the toolchain if None

        Returns:
            BuildMetadata: Derived metadata

        Raises:
            MetadataUnavailable: If the target does not resolve to a commit or its
                time cannot be obtained
            ValueError: If a release is missing its tag or pins something other
                than a commit hash
        """
        if mode == BuildMode.RELEASE:
            if not tag_or_ref:
                raise ValueError("Release builds require a tag")
            if not pinned_revision:
                raise ValueError(f"Release '{tag_or_ref}' has no pinned revision")
            if not is_commit_hash(pinned_revision):
                raise ValueError(
                    f"Release '{tag_or_ref}' must pin a commit hash, got '{pinned_revision}'"
                )
            target_ref = pinned_revision
        else:
            target_ref = tag_or_ref or HEAD_REF

        # Timestamp and hash are both read from this one commit
        commit = self.history.resolve_commit(target_ref)
        if mode == BuildMode.RELEASE and not commit.startswith(pinned_revision.lower()):
            # A branch or tag named like a hash shadows the commit it abbreviates
            raise MetadataUnavailable(
                f"Pinned revision '{pinned_revision}' resolved to unrelated commit {commit}"
            )

        # The tag is never parsed for a date, even when it embeds one
        committed_at = self.history.commit_timestamp(commit, source=self.timestamp_source)
        build_time = format_build_time(committed_at)

        if mode == BuildMode.RELEASE:
            build_id = strip_version_prefix(tag_or_ref)
        else:
            build_id = self.history.short_hash(commit, SHORT_HASH_LENGTH) or HEAD_BUILD_ID

        if host_platform is None:
            host_platform = resolve_host_platform(self.toolchain)

        return BuildMetadata(
            build_id=build_id,
            build_time=build_time,
            build_host=str(host_platform),
        )
