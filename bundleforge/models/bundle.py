"""Models for the checked-out source, the built artifact, and the bundle record."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bundleforge.models.stages import StateTransition

DEFAULT_BUNDLE_NAME = "unknown.lynx.bundle"


class CheckedOutRepository(BaseModel):
    """A git working tree produced by the source fetcher."""

    model_config = ConfigDict(frozen=True)

    root: Path
    project_dir: Path
    requested_revision: str | None = None  # branch, tag, sha, or None for tip


class ProjectVersion(BaseModel):
    """A semantic version string and its derived integer version code."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: int = Field(ge=0)


class ProjectManifest(BaseModel):
    """The parts of the project's ``package.json`` the pipeline consumes."""

    model_config = ConfigDict(frozen=True)

    version: ProjectVersion
    bundle_name: str = DEFAULT_BUNDLE_NAME
    preset: bool = False


class ResolvedRevision(BaseModel):
    """What the revision reader found in the checkout."""

    model_config = ConfigDict(frozen=True)

    commit_hash: str
    manifest: ProjectManifest


class BuildArtifact(BaseModel):
    """The built bundle file together with the exact bytes that were hashed.

    The uploader sends ``content`` rather than re-reading ``path`` so the
    digest always describes the bytes on the wire.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    sha256: str
    size_bytes: int
    content: bytes = Field(repr=False, exclude=True)


class BundleRecord(BaseModel):
    """Metadata payload sent to the registration API.

    Field names match the API's JSON keys.
    """

    model_config = ConfigDict(frozen=True)

    app_name: str
    version_code: int
    version_name: str
    min_app_version: int
    max_app_version: int
    bundle_name: str
    commit_hash: str
    bundle_sha256: str
    download_url: str
    is_preset: bool = False


class DeployResult(BaseModel):
    """Outcome of a successful run."""

    model_config = ConfigDict(frozen=True)

    record: BundleRecord
    registration: Any = None  # the API's ``data`` field, passed through as-is
    transitions: list[StateTransition] = []
