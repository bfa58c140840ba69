"""Runtime configuration — env-driven settings plus the deploy config file.

Three sources feed one immutable :class:`PipelineConfig`:

* :class:`RuntimeSettings` - tool-level knobs read from ``BUNDLEFORGE_*``
  environment variables or a ``.env`` file.
* :class:`FileConfig` - the JSON document at ``<config_root>/config.json``.
* :class:`DeployOverrides` - the unprefixed per-deploy environment variables
  (``PROJECT_PATH``, ``REPO_URL``, ``BUILD_COMMIT``, ...) set by CI.

Only the CLI instantiates the settings classes; everything below it receives
the resolved ``PipelineConfig``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bundleforge.core.errors import ConfigError
from bundleforge.models.config import (
    DEFAULT_APP_NAME,
    DEFAULT_MAX_APP_VERSION,
    DEFAULT_MIN_APP_VERSION,
    CredentialSource,
    PipelineConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
DEPLOY_KEY_NAME = "deploy_key"


class RuntimeSettings(BaseSettings):
    """Tool-level settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BUNDLEFORGE_CONFIG_ROOT=/etc/bundleforge
        export BUNDLEFORGE_LOG_LEVEL=DEBUG
        export BUNDLEFORGE_PACKAGE_MANAGER=npm
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUNDLEFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_root: Path = Path("/config")
    workspace_dir: Path = Path("repo")
    package_manager: str = "pnpm"
    storage_prefix: str = "lynxbundles"
    http_timeout_seconds: float = 120.0
    log_level: str = "INFO"

    @property
    def config_file(self) -> Path:
        return self.config_root / CONFIG_FILE_NAME

    @property
    def deploy_key(self) -> Path:
        return self.config_root / DEPLOY_KEY_NAME


class DeployOverrides(BaseSettings):
    """Per-deploy environment variables, read without a prefix.

    Empty strings count as unset, matching how CI systems export variables
    that were declared but not filled in.
    """

    model_config = SettingsConfigDict(extra="ignore")

    project_path: str | None = None
    repo_url: str | None = None
    build_commit: str | None = None
    app_name: str | None = None
    min_app_version: int | None = None
    max_app_version: int | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _empty_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class FileConfig(BaseModel):
    """Shape of ``config.json``; keys are camelCase on disk."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    project_path: str = Field(default="", alias="projectPath")
    repo: str = ""
    dist_path: str = Field(default="", alias="distPath")
    assets_upload_url: str = Field(default="", alias="assetsUploadUrl")
    assets_upload_token: str = Field(default="", alias="assetsUploadToken", repr=False)
    bundle_upload_url: str = Field(default="", alias="bundleUploadUrl")
    bundle_upload_token: str = Field(default="", alias="bundleUploadToken", repr=False)
    build_branch: str | None = Field(default=None, alias="BUILD_BRANCH")


# ---------------------------------------------------------------------------
# Loading and resolution
# ---------------------------------------------------------------------------


def load_file_config(path: Path) -> FileConfig:
    """Read and validate the JSON configuration file at *path*."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    try:
        return FileConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


def _first_set(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def resolve_pipeline_config(
    settings: RuntimeSettings,
    overrides: DeployOverrides | None = None,
    file_config: FileConfig | None = None,
) -> PipelineConfig:
    """Merge settings, the config file and env overrides into a PipelineConfig.

    Parameters
    ----------
    settings:
        Tool-level settings; locates the config file and deploy key.
    overrides:
        Per-deploy environment overrides.  Read from the environment when
        not provided.
    file_config:
        Parsed ``config.json``.  Loaded from ``settings.config_file`` when
        not provided.

    Raises
    ------
    ConfigError
        If the file cannot be read or the merged values fail validation.
    """
    if file_config is None:
        file_config = load_file_config(settings.config_file)
    if overrides is None:
        try:
            overrides = DeployOverrides()
        except ValidationError as exc:
            raise ConfigError(f"Invalid environment override: {exc}") from exc

    revision = _first_set(overrides.build_commit, file_config.build_branch)

    credentials: CredentialSource | None = None
    if settings.deploy_key.is_file():
        credentials = CredentialSource(key_path=settings.deploy_key)
    else:
        logger.info(
            "No deploy key at %s; git will use its default transport credentials",
            settings.deploy_key,
        )

    def _pick_int(value: int | None, default: int) -> int:
        return default if value is None else value

    try:
        config = PipelineConfig(
            repo_url=_first_set(overrides.repo_url, file_config.repo) or "",
            revision=revision,
            project_path=_first_set(overrides.project_path, file_config.project_path) or "",
            workspace_dir=settings.workspace_dir,
            credentials=credentials,
            package_manager=settings.package_manager,
            dist_path=file_config.dist_path,
            assets_upload_url=file_config.assets_upload_url,
            assets_upload_token=file_config.assets_upload_token,
            bundle_upload_url=file_config.bundle_upload_url,
            bundle_upload_token=file_config.bundle_upload_token,
            storage_prefix=settings.storage_prefix,
            http_timeout_seconds=settings.http_timeout_seconds,
            app_name=overrides.app_name or DEFAULT_APP_NAME,
            min_app_version=_pick_int(overrides.min_app_version, DEFAULT_MIN_APP_VERSION),
            max_app_version=_pick_int(overrides.max_app_version, DEFAULT_MAX_APP_VERSION),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline configuration: {exc}") from exc

    logger.debug(
        "Resolved config: repo=%s revision=%s project_path=%r",
        config.repo_url,
        config.revision or "latest",
        config.project_path,
    )
    return config
