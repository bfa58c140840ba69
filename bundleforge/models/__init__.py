"""bundleforge data models — all Pydantic v2, all frozen (immutable)."""

from bundleforge.models.bundle import (
    BuildArtifact,
    BundleRecord,
    CheckedOutRepository,
    DeployResult,
    ProjectManifest,
    ProjectVersion,
    ResolvedRevision,
)
from bundleforge.models.config import CredentialSource, PipelineConfig
from bundleforge.models.stages import (
    PIPELINE_ORDER,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

__all__ = [
    # config
    "CredentialSource",
    "PipelineConfig",
    # bundle
    "BuildArtifact",
    "BundleRecord",
    "CheckedOutRepository",
    "DeployResult",
    "ProjectManifest",
    "ProjectVersion",
    "ResolvedRevision",
    # stages
    "PIPELINE_ORDER",
    "VALID_TRANSITIONS",
    "PipelineState",
    "StateTransition",
]
