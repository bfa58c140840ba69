"""``bundleforge deploy`` — run the build-and-publish pipeline.

Resolves the configuration once, then clones, builds, hashes, uploads and
registers the bundle.  Exits 0 only after registration succeeds; 1 on any
pipeline failure; 2 when the configuration cannot be resolved.
"""

from __future__ import annotations

import logging

import typer
from rich.markup import escape
from rich.panel import Panel

from bundleforge.cli.common import configure_logging, console, load_settings
from bundleforge.config import resolve_pipeline_config
from bundleforge.core.errors import (
    CommandError,
    ConfigError,
    PipelineError,
    RegistrationError,
    UploadError,
)
from bundleforge.core.orchestrator import DeployPipeline

logger = logging.getLogger(__name__)


def _failure_details(exc: PipelineError) -> list[str]:
    lines = [f"[bold]Error:[/bold]   {type(exc).__name__}"]
    if isinstance(exc, CommandError):
        lines.append(f"[bold]Command:[/bold] {escape(' '.join(exc.command))}")
        lines.append(f"[bold]Exit:[/bold]    {exc.exit_code}")
    elif isinstance(exc, UploadError):
        lines.append(f"[bold]URL:[/bold]     {escape(exc.url)}")
        status = exc.status_code if exc.status_code is not None else "no response"
        lines.append(f"[bold]Status:[/bold]  {status}")
    elif isinstance(exc, RegistrationError):
        lines.append(f"[bold]Code:[/bold]    {escape(repr(exc.code))}")
    lines.extend(["", f"[dim]{escape(str(exc))}[/dim]"])
    return lines


def deploy_cmd(
    config_root: str = typer.Option(
        None,
        "--config-root",
        "-c",
        help="Directory holding config.json and deploy_key.",
    ),
    workspace: str = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Directory to clone the repository into.",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    ),
) -> None:
    """Clone, build, hash, upload and register a bundle.

    Configuration comes from ``<config-root>/config.json``; ``PROJECT_PATH``,
    ``REPO_URL``, ``BUILD_COMMIT``, ``APP_NAME``, ``MIN_APP_VERSION`` and
    ``MAX_APP_VERSION`` override it.
    """
    settings = load_settings(config_root, workspace, log_level)
    configure_logging(settings.log_level)

    try:
        config = resolve_pipeline_config(settings)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    console.print(
        f"[bold cyan]Deploying[/bold cyan] {escape(config.repo_url)} "
        f"at {escape(config.revision or 'latest')}"
    )

    pipeline = DeployPipeline(config)
    try:
        result = pipeline.run()
    except PipelineError as exc:
        logger.error("Deployment failed in state %s: %s", pipeline.state.value, exc)
        console.print(
            Panel(
                "\n".join(_failure_details(exc)),
                title="[bold]Deployment failed[/bold]",
                border_style="red",
                padding=(1, 2),
            )
        )
        raise typer.Exit(code=1)

    record = result.record
    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Bundle published![/bold green]",
                "",
                f"[bold]App:[/bold]      {record.app_name}",
                f"[bold]Version:[/bold]  {record.version_name} (code {record.version_code})",
                f"[bold]Bundle:[/bold]   {record.bundle_name}",
                f"[bold]Commit:[/bold]   {record.commit_hash}",
                f"[bold]SHA256:[/bold]   {record.bundle_sha256}",
                f"[bold]URL:[/bold]      {record.download_url}",
                f"[bold]Compat:[/bold]   {record.min_app_version} - {record.max_app_version}",
            ]),
            title="[bold]bundleforge[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
