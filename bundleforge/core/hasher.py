"""Artifact hashing and content addressing.

The SHA-256 hex digest of the bundle is both its identity and its storage
key: identical bytes always map to the same upload path.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from bundleforge.core.errors import ArtifactNotFoundError
from bundleforge.models.bundle import BuildArtifact

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PREFIX = "lynxbundles"
BUNDLE_SUFFIX = ".bundle"


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def storage_path(digest: str, prefix: str = DEFAULT_STORAGE_PREFIX) -> str:
    """Content-addressed upload path: ``<prefix>/<sha256>.bundle``."""
    prefix = prefix.strip("/")
    name = f"{digest}{BUNDLE_SUFFIX}"
    return f"{prefix}/{name}" if prefix else name


def hash_artifact(path: Path) -> BuildArtifact:
    """Read the artifact at *path* once and digest it.

    A missing artifact means the build did not produce what the config
    declares, so it is reported as :class:`ArtifactNotFoundError` before any
    read is attempted.
    """
    path = Path(path)
    if not path.is_file():
        raise ArtifactNotFoundError(path)

    content = path.read_bytes()
    digest = sha256_hex(content)
    logger.info("Bundle SHA256: %s (%d bytes)", digest, len(content))
    return BuildArtifact(
        path=path,
        sha256=digest,
        size_bytes=len(content),
        content=content,
    )
