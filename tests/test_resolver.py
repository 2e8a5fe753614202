"""Tests for tapmeta_cli.core.resolver.

Covers release reproducibility, UTC normalization, development builds and
build host selection.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from conftest import FakeHistory, FakeToolchain
from tapmeta_cli.core.resolver import BuildMetadataResolver, HEAD_BUILD_ID
from tapmeta_cli.models.build_metadata import (
    BuildMetadata,
    BuildMode,
    HostPlatform,
    MetadataUnavailable,
)


RELEASE_SHA = "022a3b073642657744d96d79dff27224d08e65ed"
HEAD_SHA = "fe2cf7d13695b9f3de2a2b47aa735fa50a0e2100"
EDT = timezone(timedelta(hours=-4))
CEST = timezone(timedelta(hours=2))
LINUX_AMD64 = HostPlatform("linux", "amd64")


@pytest.fixture
def history() -> FakeHistory:
    return FakeHistory(
        timestamps={
            RELEASE_SHA: datetime(2025, 8, 5, 10, 0, 0, tzinfo=EDT),
            HEAD_SHA: datetime(2025, 9, 1, 23, 30, 0, tzinfo=CEST),
        },
        refs={"HEAD": HEAD_SHA, "main": HEAD_SHA},
    )


class TestReleaseMode:
    """Release builds derive everything from the pinned tag and revision."""

    def test_dated_tag_uses_commit_time(self, history):
        """The date inside the tag is ignored; the commit time wins."""
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.RELEASE, "v0.20250805.0", RELEASE_SHA)

        assert metadata.build_id == "0.20250805.0"
        assert metadata.build_time == "2025-08-05T14:00:00Z"
        assert metadata.build_host == "linux/amd64"

    def test_timestamp_comes_from_pinned_revision_not_head(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA)

        assert history.queries == [(RELEASE_SHA, "committer")]
        assert "HEAD" not in history.resolved

    def test_abbreviated_revision(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA[:7])

        assert metadata.build_time == "2025-08-05T14:00:00Z"
        assert history.queries == [(RELEASE_SHA, "committer")]

    def test_repeated_resolution_is_identical(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        first = resolver.resolve(BuildMode.RELEASE, "v0.15.0", RELEASE_SHA)
        second = resolver.resolve(BuildMode.RELEASE, "v0.15.0", RELEASE_SHA)

        assert first == second
        assert first.as_env() == second.as_env()

    def test_tag_without_v_prefix_is_kept(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.RELEASE, "release-2022-12-12", RELEASE_SHA)

        assert metadata.build_id == "release-2022-12-12"

    def test_word_tag_keeps_leading_v(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.RELEASE, "vault-1.2", RELEASE_SHA)

        assert metadata.build_id == "vault-1.2"

    def test_missing_revision_is_rejected(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(ValueError, match="no pinned revision"):
            resolver.resolve(BuildMode.RELEASE, "v1.0.0", None)

    def test_missing_tag_is_rejected(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(ValueError, match="require a tag"):
            resolver.resolve(BuildMode.RELEASE, None, RELEASE_SHA)

    @pytest.mark.parametrize("revision", ["HEAD", "main", "v1.0.0", "--all", "HEAD~1"])
    def test_moving_reference_as_revision_is_rejected(self, history, revision):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(ValueError, match="must pin a commit hash"):
            resolver.resolve(BuildMode.RELEASE, "v1.0.0", revision)
        assert history.resolved == []

    def test_revision_shadowed_by_ref_fails(self, history):
        """A ref named like the pinned hash must not redirect the release."""
        history.refs["022a3b0"] = HEAD_SHA
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(MetadataUnavailable, match="unrelated commit"):
            resolver.resolve(BuildMode.RELEASE, "v1.0.0", "022a3b0")

    def test_unknown_revision_fails_without_wall_clock_fallback(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(MetadataUnavailable):
            resolver.resolve(BuildMode.RELEASE, "v1.0.0", "deadbeefdeadbeef")

    def test_author_timestamp_source(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64),
                                         timestamp_source="author")

        resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA)

        assert history.queries == [(RELEASE_SHA, "author")]


class TestDevelopmentMode:
    """Development builds follow the current head of the tracked branch."""

    def test_defaults_to_head(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.DEVELOPMENT)

        assert metadata.build_id == HEAD_SHA[:8]
        assert metadata.build_time == "2025-09-01T21:30:00Z"
        assert history.resolved[0] == "HEAD"
        assert history.queries == [(HEAD_SHA, "committer")]

    def test_explicit_branch(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.DEVELOPMENT, "main")

        assert metadata.build_id == HEAD_SHA[:8]
        assert history.resolved[0] == "main"

    def test_hash_and_time_come_from_the_same_commit(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        resolver.resolve(BuildMode.DEVELOPMENT)

        # Only the first lookup sees the symbolic name
        assert history.resolved.count("HEAD") == 1
        assert set(history.resolved[1:]) == {HEAD_SHA}

    def test_missing_hash_uses_placeholder(self):
        history = FakeHistory(
            timestamps={HEAD_SHA: datetime(2025, 1, 1, tzinfo=timezone.utc)},
            refs={"HEAD": HEAD_SHA},
            hashes_available=False,
        )
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.DEVELOPMENT)

        assert metadata.build_id == HEAD_BUILD_ID
        assert metadata.build_time == "2025-01-01T00:00:00Z"

    def test_unresolvable_reference_fails(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(MetadataUnavailable):
            resolver.resolve(BuildMode.DEVELOPMENT, "no-such-branch")

    def test_option_like_reference_fails(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        with pytest.raises(MetadataUnavailable, match="Invalid git reference"):
            resolver.resolve(BuildMode.DEVELOPMENT, "--all")

    def test_pinned_revision_is_ignored(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        resolver.resolve(BuildMode.DEVELOPMENT, None, RELEASE_SHA)

        assert history.queries == [(HEAD_SHA, "committer")]


class TestBuildTime:
    """build_time is always UTC with a trailing Z."""

    @pytest.mark.parametrize("offset_hours", [-12, -4, 0, 5.5, 14])
    def test_any_offset_normalizes_to_utc(self, offset_hours):
        moment = datetime(2025, 8, 5, 10, 0, 0, tzinfo=timezone(timedelta(hours=offset_hours)))
        history = FakeHistory(timestamps={HEAD_SHA: moment}, refs={"HEAD": HEAD_SHA})
        resolver = BuildMetadataResolver(history, FakeToolchain(LINUX_AMD64))

        metadata = resolver.resolve(BuildMode.DEVELOPMENT)

        assert metadata.build_time.endswith("Z")
        parsed = datetime.strptime(metadata.build_time, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
        assert parsed == moment


class TestBuildHost:
    """The toolchain's declared target takes precedence over the native platform."""

    def test_toolchain_target_wins_over_native(self, history):
        toolchain = FakeToolchain(HostPlatform("windows", "arm64"))
        resolver = BuildMetadataResolver(history, toolchain)

        with patch("tapmeta_cli.core.toolchain.detect_platform", return_value="linux"), \
             patch("tapmeta_cli.core.toolchain.detect_arch", return_value="amd64"):
            metadata = resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA)

        assert metadata.build_host == "windows/arm64"

    def test_unavailable_toolchain_falls_back_to_native(self, history):
        resolver = BuildMetadataResolver(history, FakeToolchain(None))

        with patch("tapmeta_cli.core.toolchain.detect_platform", return_value="darwin"), \
             patch("tapmeta_cli.core.toolchain.detect_arch", return_value="arm64"):
            metadata = resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA)

        assert metadata.build_host == "darwin/arm64"

    def test_explicit_host_skips_toolchain_query(self, history):
        toolchain = FakeToolchain(HostPlatform("windows", "arm64"))
        resolver = BuildMetadataResolver(history, toolchain)

        metadata = resolver.resolve(BuildMode.RELEASE, "v1.0.0", RELEASE_SHA,
                                    host_platform=HostPlatform("freebsd", "amd64"))

        assert metadata.build_host == "freebsd/amd64"
        assert toolchain.calls == 0

    def test_metadata_failure_happens_before_toolchain_query(self, history):
        toolchain = FakeToolchain(LINUX_AMD64)
        resolver = BuildMetadataResolver(history, toolchain)

        with pytest.raises(MetadataUnavailable):
            resolver.resolve(BuildMode.DEVELOPMENT, "no-such-branch")
        assert toolchain.calls == 0


def test_metadata_env_names():
    metadata = BuildMetadata("0.15.0", "2025-08-05T14:00:00Z", "linux/amd64")

    assert metadata.as_env() == {
        "BUILD_ID": "0.15.0",
        "BUILD_TIME": "2025-08-05T14:00:00Z",
        "BUILD_HOST": "linux/amd64",
    }
