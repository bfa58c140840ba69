"""Revision reader — commit hash and project version from a checkout.

Version codes
-------------
A version ``major.minor.patch`` maps to the integer
``major * 1000**2 + minor * 1000 + patch``.  The code orders bundles and
gates app compatibility, so parsing is strict:

* one to three dot-separated components; missing trailing components are
  zero (``"1.2"`` is ``1_002_000``)
* every component is a non-empty run of ASCII digits in ``[0, 999]``
* anything else (``"1..2"``, ``"1.2.x"``, ``"1.2.3-beta"``, ``"1.2.3.4"``,
  ``"1.1000.0"``) raises :class:`VersionParseError`

The range check keeps the mapping injective and order-preserving.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from bundleforge.core.errors import SourceFetchError, VersionParseError
from bundleforge.core.runner import CommandRunner
from bundleforge.models.bundle import (
    DEFAULT_BUNDLE_NAME,
    CheckedOutRepository,
    ProjectManifest,
    ProjectVersion,
    ResolvedRevision,
)

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
DEFAULT_VERSION = "0.0.0"

_COMPONENT_WEIGHTS = (1000**2, 1000, 1)
_MAX_COMPONENT = 999


def version_code(version: str) -> int:
    """Return the integer version code for *version*."""
    parts = version.split(".")
    if len(parts) > len(_COMPONENT_WEIGHTS):
        raise VersionParseError(
            f"Version {version!r} has {len(parts)} components; at most 3 are allowed"
        )

    code = 0
    for part, weight in zip(parts, _COMPONENT_WEIGHTS):
        if not (part.isascii() and part.isdigit()):
            raise VersionParseError(
                f"Version {version!r} has a non-numeric component {part!r}"
            )
        value = int(part)
        if value > _MAX_COMPONENT:
            raise VersionParseError(
                f"Version {version!r} component {part!r} exceeds {_MAX_COMPONENT}"
            )
        code += value * weight
    return code


def parse_version(version: str) -> ProjectVersion:
    """Parse *version* into a :class:`ProjectVersion`."""
    version = version.strip()
    return ProjectVersion(name=version, code=version_code(version))


def parse_manifest(data: dict[str, Any]) -> ProjectManifest:
    """Extract version and bundle settings from a decoded ``package.json``."""
    raw_version = data.get("version") or DEFAULT_VERSION
    if not isinstance(raw_version, str):
        raise VersionParseError(f"Manifest version must be a string, got {raw_version!r}")

    bundle_config = data.get("bundleConfig") or {}
    if not isinstance(bundle_config, dict):
        bundle_config = {}

    preset = bundle_config.get("preset")
    if preset is None:
        preset = False
    if not isinstance(preset, bool):
        raise VersionParseError(f"bundleConfig.preset must be a boolean, got {preset!r}")

    try:
        return ProjectManifest(
            version=parse_version(raw_version),
            bundle_name=bundle_config.get("bundleName") or DEFAULT_BUNDLE_NAME,
            preset=preset,
        )
    except ValidationError as exc:
        raise VersionParseError(f"Invalid bundleConfig in manifest: {exc}") from exc


class RevisionReader:
    """Reads HEAD and the project manifest from a checked-out repository."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def commit_hash(self, checkout: CheckedOutRepository) -> str:
        """Return the checked-out commit, as reported by ``git rev-parse HEAD``."""
        command = ["git", "rev-parse", "HEAD"]
        exit_code, output = self._runner.capture(command, cwd=checkout.root)
        if exit_code != 0:
            raise SourceFetchError(command, exit_code)
        commit = output.strip()
        if not commit:
            raise SourceFetchError(command, exit_code, "no commit hash in output")
        return commit

    def manifest(self, checkout: CheckedOutRepository) -> ProjectManifest:
        """Parse the project's ``package.json``."""
        path = checkout.project_dir / MANIFEST_NAME
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise VersionParseError(f"Project manifest not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise VersionParseError(f"Cannot parse project manifest {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise VersionParseError(f"Project manifest {path} must contain a JSON object")
        return parse_manifest(data)

    def read(self, checkout: CheckedOutRepository) -> ResolvedRevision:
        manifest = self.manifest(checkout)
        logger.info(
            "Project version: %s (code: %d)",
            manifest.version.name,
            manifest.version.code,
        )
        commit = self.commit_hash(checkout)
        logger.info("Current commit hash: %s", commit)
        return ResolvedRevision(commit_hash=commit, manifest=manifest)
