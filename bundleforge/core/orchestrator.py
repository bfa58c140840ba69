"""Deployment orchestrator — runs the build-and-publish pipeline once.

The DeployPipeline wires the SourceFetcher, RevisionReader, BuildRunner,
artifact hasher, ArtifactUploader and BundleRegistrar together and drives
the PipelineStateMachine through:

    configured -> fetched -> version_resolved -> built -> hashed
        -> uploaded -> registered -> done

Any exception moves the machine to FAILED and propagates unchanged; no
later step runs.  Nothing is cleaned up: a partial clone or an uploaded but
unregistered bundle is left behind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import requests

from bundleforge.core.build_runner import BuildRunner
from bundleforge.core.hasher import hash_artifact, storage_path
from bundleforge.core.registrar import BundleRegistrar
from bundleforge.core.revision import RevisionReader
from bundleforge.core.runner import CommandRunner
from bundleforge.core.source_fetcher import SourceFetcher
from bundleforge.core.stage_machine import PipelineStateMachine
from bundleforge.core.uploader import ArtifactUploader
from bundleforge.models.bundle import (
    BuildArtifact,
    BundleRecord,
    CheckedOutRepository,
    DeployResult,
    ResolvedRevision,
)
from bundleforge.models.config import PipelineConfig
from bundleforge.models.stages import PipelineState

logger = logging.getLogger(__name__)


def build_bundle_record(
    config: PipelineConfig,
    revision: ResolvedRevision,
    artifact: BuildArtifact,
    download_url: str,
) -> BundleRecord:
    """Assemble the registration payload for a published bundle."""
    manifest = revision.manifest
    return BundleRecord(
        app_name=config.app_name,
        version_code=manifest.version.code,
        version_name=manifest.version.name,
        min_app_version=config.min_app_version,
        max_app_version=config.max_app_version,
        bundle_name=manifest.bundle_name,
        commit_hash=revision.commit_hash,
        bundle_sha256=artifact.sha256,
        download_url=download_url,
        is_preset=manifest.preset,
    )


class DeployPipeline:
    """Single-shot deployment pipeline.

    Parameters
    ----------
    config:
        The resolved pipeline configuration.
    runner:
        Executes git and package manager commands.  Defaults to a real
        :class:`CommandRunner`.
    session:
        HTTP session for upload and registration.  Defaults to a new
        ``requests.Session``, closed when :meth:`run` returns.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        runner: CommandRunner | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        runner = runner or CommandRunner()
        self._owned_session = None if session is not None else requests.Session()
        session = session or self._owned_session

        self.fetcher = SourceFetcher(runner, credentials=config.credentials)
        self.reader = RevisionReader(runner)
        self.builder = BuildRunner(runner, package_manager=config.package_manager)
        self.uploader = ArtifactUploader(
            session,
            config.assets_upload_url,
            config.assets_upload_token,
            timeout=config.http_timeout_seconds,
        )
        self.registrar = BundleRegistrar(
            session,
            config.bundle_upload_url,
            config.bundle_upload_token,
            timeout=config.http_timeout_seconds,
        )
        self.state_machine = PipelineStateMachine()

    @property
    def state(self) -> PipelineState:
        return self.state_machine.state

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _step(self, target: PipelineState, action: Callable[[], Any]) -> Any:
        """Run *action*; advance to *target* on success, FAILED otherwise."""
        try:
            result = action()
        except Exception as exc:
            self.state_machine.fail(f"{type(exc).__name__}: {exc}")
            raise
        self.state_machine.transition(target)
        return result

    def run(self) -> DeployResult:
        """Execute every step in order and return the registered bundle."""
        try:
            return self._execute()
        finally:
            if self._owned_session is not None:
                self._owned_session.close()

    def _execute(self) -> DeployResult:
        config = self.config

        checkout: CheckedOutRepository = self._step(
            PipelineState.FETCHED,
            lambda: self.fetcher.fetch(
                config.repo_url,
                config.workspace_dir,
                config.revision,
                project_path=config.project_path,
            ),
        )
        revision: ResolvedRevision = self._step(
            PipelineState.VERSION_RESOLVED,
            lambda: self.reader.read(checkout),
        )
        self._step(
            PipelineState.BUILT,
            lambda: self.builder.build(checkout.project_dir),
        )
        artifact: BuildArtifact = self._step(
            PipelineState.HASHED,
            lambda: hash_artifact(checkout.project_dir / config.dist_path),
        )
        download_url: str = self._step(
            PipelineState.UPLOADED,
            lambda: self.uploader.upload(
                artifact, storage_path(artifact.sha256, config.storage_prefix)
            ),
        )

        def _register() -> tuple[BundleRecord, Any]:
            record = build_bundle_record(config, revision, artifact, download_url)
            return record, self.registrar.register(record)

        record, registration = self._step(PipelineState.REGISTERED, _register)
        self.state_machine.transition(PipelineState.DONE)

        return DeployResult(
            record=record,
            registration=registration,
            transitions=self.state_machine.history,
        )
