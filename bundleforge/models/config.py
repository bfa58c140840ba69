"""Pipeline configuration models."""

from __future__ import annotations

import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_APP_NAME = "app"
DEFAULT_MIN_APP_VERSION = 1
DEFAULT_MAX_APP_VERSION = 999_999_999


class CredentialSource(BaseModel):
    """Private key handed to the git transport for SSH authentication.

    Host-key checking is disabled: build workers are ephemeral and have no
    known_hosts to pin against.
    """

    model_config = ConfigDict(frozen=True)

    key_path: Path

    def ssh_command(self) -> str:
        """Return the ``GIT_SSH_COMMAND`` value for this key."""
        return (
            f"ssh -i {shlex.quote(str(self.key_path))} "
            "-o IdentitiesOnly=yes -o StrictHostKeyChecking=no"
        )

    def git_env(self) -> dict[str, str]:
        """Environment overrides applied to every git invocation."""
        return {"GIT_SSH_COMMAND": self.ssh_command()}


class PipelineConfig(BaseModel):
    """Fully resolved settings for one deployment run.

    Created once at startup by
    :func:`bundleforge.config.resolve_pipeline_config` and passed to every
    component.  Nothing downstream reads environment variables.
    """

    model_config = ConfigDict(frozen=True)

    # Source
    repo_url: str = Field(min_length=1)
    revision: str | None = None
    project_path: str = ""
    workspace_dir: Path = Path("repo")
    credentials: CredentialSource | None = None

    # Build
    package_manager: str = "pnpm"
    dist_path: str = Field(min_length=1)

    # Publishing
    assets_upload_url: str = Field(min_length=1)
    assets_upload_token: str = Field(min_length=1, repr=False)
    bundle_upload_url: str = Field(min_length=1)
    bundle_upload_token: str = Field(min_length=1, repr=False)
    storage_prefix: str = "lynxbundles"
    http_timeout_seconds: float = Field(default=120.0, gt=0)

    # Bundle metadata
    app_name: str = DEFAULT_APP_NAME
    min_app_version: int = Field(default=DEFAULT_MIN_APP_VERSION, ge=0)
    max_app_version: int = Field(default=DEFAULT_MAX_APP_VERSION, ge=0)

    @model_validator(mode="after")
    def _check_version_bounds(self) -> PipelineConfig:
        if self.min_app_version > self.max_app_version:
            raise ValueError(
                f"min_app_version ({self.min_app_version}) is greater than "
                f"max_app_version ({self.max_app_version})"
            )
        return self

    @property
    def project_dir(self) -> Path:
        """Directory of the project inside the cloned workspace."""
        return self.workspace_dir / self.project_path

    @property
    def artifact_path(self) -> Path:
        """Location of the distribution artifact once the build has run."""
        return self.project_dir / self.dist_path
