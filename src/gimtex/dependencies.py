"""Best-effort project summary from root manifest files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import tomlkit
from packaging.requirements import InvalidRequirement, Requirement
from tomlkit.exceptions import TOMLKitError

from gimtex.config import MAX_DEPENDENCIES
from gimtex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

UNKNOWN_NAME = "Unknown"
ANY_VERSION = "*"


@dataclass(frozen=True)
class ManifestSummary:
    """Name, ecosystem and the first dependencies declared by one manifest."""

    name: str
    ecosystem: str
    dependencies: list[tuple[str, str]] = field(default_factory=list)
    has_dependency_table: bool = False

    def render(self) -> str:
        out = [f"[+] Project: {self.name} ({self.ecosystem})"]
        if self.has_dependency_table:
            out.append("[+] Dependencies:")
            out.extend(f"    - {dep}: {version}" for dep, version in self.dependencies)
        return "\n".join(out) + "\n"


def _toml_version(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, str):
        return str(value)
    if isinstance(value, dict):
        version = value.get("version")
        if isinstance(version, str):
            return str(version)
    return ANY_VERSION


def parse_cargo_toml(text: str) -> ManifestSummary:
    """Summarize a `Cargo.toml` document.

    Args:
        text (str): the manifest content

    Raises:
        TOMLKitError: if the document is not valid TOML.

    Returns:
        ManifestSummary: the crate name and its `[dependencies]`
    """
    doc = tomlkit.parse(text).unwrap()
    package = doc.get("package")
    name = UNKNOWN_NAME
    if isinstance(package, dict) and isinstance(package.get("name"), str):
        name = package["name"]
    deps = doc.get("dependencies")
    if not isinstance(deps, dict):
        return ManifestSummary(name=name, ecosystem="Rust")
    pairs = [(str(k), _toml_version(v)) for k, v in list(deps.items())[:MAX_DEPENDENCIES]]
    return ManifestSummary(name=name, ecosystem="Rust", dependencies=pairs, has_dependency_table=True)


def parse_package_json(text: str) -> ManifestSummary:
    """Summarize a `package.json` document.

    Args:
        text (str): the manifest content

    Raises:
        ValueError: if the document is not a JSON object.

    Returns:
        ManifestSummary: the package name and its `dependencies`
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        msg = "package.json is not an object"
        raise ValueError(msg)  # noqa: TRY004
    name = data.get("name") if isinstance(data.get("name"), str) else UNKNOWN_NAME
    deps = data.get("dependencies")
    if not isinstance(deps, dict):
        return ManifestSummary(name=name, ecosystem="Node.js")
    pairs = [
        (str(k), v if isinstance(v, str) else ANY_VERSION) for k, v in list(deps.items())[:MAX_DEPENDENCIES]
    ]
    return ManifestSummary(name=name, ecosystem="Node.js", dependencies=pairs, has_dependency_table=True)


def parse_pyproject_toml(text: str) -> ManifestSummary:
    """Summarize the `[project]` table of a `pyproject.toml` document.

    Requirement strings that are not valid PEP 508 are skipped.

    Args:
        text (str): the manifest content

    Raises:
        ValueError: if the document has no `[project]` table.

    Returns:
        ManifestSummary: the project name and its runtime dependencies
    """
    doc = tomlkit.parse(text).unwrap()
    project = doc.get("project")
    if not isinstance(project, dict):
        msg = "pyproject.toml has no [project] table"
        raise ValueError(msg)  # noqa: TRY004
    name = project["name"] if isinstance(project.get("name"), str) else UNKNOWN_NAME
    raw = project.get("dependencies")
    if not isinstance(raw, list):
        return ManifestSummary(name=name, ecosystem="Python")
    pairs: list[tuple[str, str]] = []
    for item in raw:
        if len(pairs) >= MAX_DEPENDENCIES:
            break
        try:
            req = Requirement(str(item))
        except InvalidRequirement:
            continue
        pairs.append((req.name, str(req.specifier) or ANY_VERSION))
    return ManifestSummary(name=name, ecosystem="Python", dependencies=pairs, has_dependency_table=True)


MANIFEST_PARSERS: tuple[tuple[str, Callable[[str], ManifestSummary]], ...] = (
    ("Cargo.toml", parse_cargo_toml),
    ("package.json", parse_package_json),
    ("pyproject.toml", parse_pyproject_toml),
)


def inspect_dependencies(root: Path) -> str | None:
    """Build the project context block from the manifests found at `root`.

    Missing, unreadable or malformed manifests are ignored.

    Args:
        root (Path): the scan root

    Returns:
        str | None: the context block, or None when no manifest could be read
    """
    summary: list[str] = []
    for filename, parse in MANIFEST_PARSERS:
        path = root / filename
        try:
            text = path.read_text(encoding="utf-8")
            summary.append(parse(text).render())
        except (OSError, UnicodeDecodeError, ValueError, TOMLKitError) as e:
            if path.exists():
                logger.debug("Ignoring manifest %s: %s", str(path), e)
            continue
    if not summary:
        return None
    return "PROJECT CONTEXT:\n================\n" + "".join(summary) + "\n"
