"""
Test fixtures for tapmeta.

Provides temporary git repositories with commits at controlled timestamps,
an isolated configuration directory, and fake history/toolchain objects for
resolver tests.
"""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pytest
from git import Repo

from tapmeta_cli import config as settings
from tapmeta_cli.core.toolchain import Toolchain, ToolchainUnavailable
from tapmeta_cli.models.build_metadata import HostPlatform, MetadataUnavailable


# ============================================================================
# Configuration isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point the configuration file at a per-test temporary directory."""
    config_dir = tmp_path_factory.mktemp("tapmeta-config")
    monkeypatch.setattr(settings, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(settings, "CONFIG_FILE", str(config_dir / "config.json"))
    return config_dir


# ============================================================================
# Temporary Repository Fixtures
# ============================================================================


def commit_at(repo: Repo, message: str, committer_date: str,
              author_date: Optional[str] = None) -> str:
    """Create an empty commit with fixed timestamps and return its hash."""
    env = {
        "GIT_AUTHOR_NAME": "Tap Maintainer",
        "GIT_AUTHOR_EMAIL": "maintainer@example.com",
        "GIT_COMMITTER_NAME": "Tap Maintainer",
        "GIT_COMMITTER_EMAIL": "maintainer@example.com",
        "GIT_AUTHOR_DATE": author_date or committer_date,
        "GIT_COMMITTER_DATE": committer_date,
    }
    repo.git.commit("--allow-empty", "--no-gpg-sign", "--no-verify", "-m", message, env=env)
    return repo.head.commit.hexsha


@pytest.fixture
def git_repo(tmp_path: Path) -> Repo:
    """Create an empty git repository."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return Repo.init(tmp_path / "source")


@pytest.fixture
def release_repo(git_repo: Repo) -> Dict[str, str]:
    """Repository with a tagged release commit followed by a newer head commit."""
    release_sha = commit_at(git_repo, "Release 0.20250805.0", "2025-08-05T10:00:00-04:00")
    git_repo.create_tag("v0.20250805.0", ref=release_sha)
    head_sha = commit_at(git_repo, "Work after release", "2025-09-01T23:30:00+02:00")
    return {
        "path": git_repo.working_tree_dir,
        "release_sha": release_sha,
        "head_sha": head_sha,
    }


# ============================================================================
# Fakes
# ============================================================================


class FakeHistory:
    """In-memory stand-in for GitHistory.

    ``timestamps`` is keyed by full commit hash; ``refs`` maps symbolic names
    such as ``HEAD`` onto those hashes.
    """

    def __init__(self, timestamps: Dict[str, datetime], refs: Optional[Dict[str, str]] = None,
                 hashes_available: bool = True):
        self.timestamps = timestamps
        self.refs = refs or {}
        self.hashes_available = hashes_available
        self.resolved = []
        self.queries = []

    def resolve_commit(self, ref: str) -> str:
        self.resolved.append(ref)
        if ref.startswith("-"):
            raise MetadataUnavailable(f"Invalid git reference '{ref}'")
        commit = self.refs.get(ref, ref)
        matches = [sha for sha in self.timestamps if sha.startswith(commit.lower())]
        if len(matches) != 1:
            raise MetadataUnavailable(f"Could not resolve '{ref}' to a commit")
        return matches[0]

    def commit_timestamp(self, ref: str, source: str = "committer") -> datetime:
        self.queries.append((ref, source))
        return self.timestamps[self.resolve_commit(ref)]

    def short_hash(self, ref: str = "HEAD", length: int = 8) -> Optional[str]:
        if not self.hashes_available:
            return None
        return self.resolve_commit(ref)[:length]


class FakeToolchain(Toolchain):
    """Toolchain returning a fixed platform, or failing."""

    name = "fake"

    def __init__(self, platform: Optional[HostPlatform] = None):
        self.platform = platform
        self.calls = 0

    def target_platform(self) -> HostPlatform:
        self.calls += 1
        if self.platform is None:
            raise ToolchainUnavailable("fake toolchain missing")
        return self.platform


@pytest.fixture
def write_formula(tmp_path: Path):
    """Write a formula YAML file into a temporary Formula directory."""
    formula_dir = tmp_path / "Formula"
    formula_dir.mkdir(exist_ok=True)

    def _write(name: str, content: str) -> Path:
        path = formula_dir / f"{name}.yml"
        path.write_text(content, encoding="utf-8")
        return path

    _write.dir = formula_dir
    return _write
