"""Formula data models and loading logic."""

import re
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List


DEFAULT_HEAD_BRANCH = "main"

# Full or abbreviated commit hash (SHA-1 or SHA-256)
REVISION_PATTERN = re.compile(r'^[a-f0-9]{7,64}$')


def strip_version_prefix(tag: str) -> str:
    """Strip the ``v`` version marker from a tag (``v1.2.3`` -> ``1.2.3``).

    Only a ``v`` directly followed by a digit is a marker; ``vault-1.2`` is
    returned unchanged.
    """
    return re.sub(r'^v(?=\d)', '', tag)


def is_commit_hash(revision: str) -> bool:
    """Check whether ``revision`` names a fixed commit rather than a moving ref."""
    return bool(REVISION_PATTERN.match(revision.lower()))


@dataclass
class SourceSpec:
    """Pinned release source of a formula."""
    url: str
    tag: Optional[str] = None
    revision: Optional[str] = None
    version: Optional[str] = None  # Explicit version overriding tag derivation


@dataclass
class HeadSpec:
    """Development source of a formula, tracking a branch."""
    url: str
    branch: str = DEFAULT_HEAD_BRANCH


@dataclass
class BuildSpec:
    """How the external build is invoked."""
    command: Optional[str] = None
    toolchain: Optional[str] = None


@dataclass
class Formula:
    """Represents a declarative build definition for one package."""
    name: str
    desc: Optional[str] = None
    homepage: Optional[str] = None
    license: Optional[str] = None
    stable: Optional[SourceSpec] = None
    head: Optional[HeadSpec] = None
    livecheck_regex: Optional[str] = None
    build: BuildSpec = field(default_factory=BuildSpec)
    path: Optional[Path] = None

    @classmethod
    def from_yml(cls, formula_path: Path) -> "Formula":
        """Load a formula from a YAML file.

        Args:
            formula_path: Path to the formula file

        Returns:
            Formula: Loaded formula instance

        Raises:
            ValueError: If the file is invalid or missing required fields
            FileNotFoundError: If the file doesn't exist
        """
        if not formula_path.exists():
            raise FileNotFoundError(f"Formula not found: {formula_path}")

        try:
            with open(formula_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {formula_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Formula must contain a YAML object, got {type(data)}")

        if 'name' not in data:
            raise ValueError(f"Missing required field 'name' in {formula_path}")

        stable = None
        if data.get('url'):
            tag = _optional_str(data.get('tag'))
            revision = _optional_str(data.get('revision'))
            if tag and not revision:
                raise ValueError(
                    f"Formula '{data['name']}' pins tag '{tag}' without a revision"
                )
            if revision and not is_commit_hash(revision):
                raise ValueError(f"Invalid revision '{revision}' in formula '{data['name']}'")
            stable = SourceSpec(
                url=str(data['url']),
                tag=tag,
                revision=revision,
                version=_optional_str(data.get('version')),
            )

        head = None
        head_data = data.get('head')
        if isinstance(head_data, str):
            head = HeadSpec(url=head_data)
        elif isinstance(head_data, dict):
            if 'url' not in head_data:
                raise ValueError(f"Missing 'url' in head section of formula '{data['name']}'")
            head = HeadSpec(
                url=str(head_data['url']),
                branch=str(head_data.get('branch') or DEFAULT_HEAD_BRANCH),
            )

        livecheck_regex = None
        livecheck = data.get('livecheck')
        if isinstance(livecheck, dict) and livecheck.get('regex'):
            livecheck_regex = str(livecheck['regex'])
            try:
                re.compile(livecheck_regex)
            except re.error as e:
                raise ValueError(f"Invalid livecheck regex in formula '{data['name']}': {e}")

        build = BuildSpec()
        build_data = data.get('build')
        if isinstance(build_data, dict):
            build = BuildSpec(
                command=_optional_str(build_data.get('command')),
                toolchain=_optional_str(build_data.get('toolchain')),
            )
        elif isinstance(build_data, str):
            build = BuildSpec(command=build_data)

        return cls(
            name=str(data['name']),
            desc=data.get('desc'),
            homepage=data.get('homepage'),
            license=data.get('license'),
            stable=stable,
            head=head,
            livecheck_regex=livecheck_regex,
            build=build,
            path=formula_path,
        )

    @property
    def has_stable(self) -> bool:
        return self.stable is not None and bool(self.stable.tag)

    @property
    def has_head(self) -> bool:
        return self.head is not None

    @property
    def version(self) -> Optional[str]:
        """Version of the stable release.

        Taken from the explicit ``version`` when present, otherwise from the
        livecheck regex applied to the tag, otherwise the tag without its
        ``v`` prefix.
        """
        if not self.stable:
            return None
        if self.stable.version:
            return self.stable.version
        if not self.stable.tag:
            return None
        if self.livecheck_regex:
            match = re.match(self.livecheck_regex, self.stable.tag, re.IGNORECASE)
            if match and match.groups():
                return match.group(1)
        return strip_version_prefix(self.stable.tag)


def find_formulae(formula_dir: Path) -> List[Path]:
    """List formula files in a directory, sorted by name."""
    if not formula_dir.is_dir():
        return []
    paths = list(formula_dir.glob("*.yml")) + list(formula_dir.glob("*.yaml"))
    return sorted(paths, key=lambda p: p.stem)


def load_formula(name: str, formula_dir: Path) -> Formula:
    """Load a formula by name or by path.

    Raises:
        FileNotFoundError: If no formula file matches
    """
    candidate = Path(name)
    if candidate.suffix in (".yml", ".yaml") and candidate.exists():
        return Formula.from_yml(candidate)

    for suffix in (".yml", ".yaml"):
        formula_path = formula_dir / f"{name}{suffix}"
        if formula_path.exists():
            return Formula.from_yml(formula_path)

    raise FileNotFoundError(f"Formula '{name}' not found in {formula_dir}")


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
