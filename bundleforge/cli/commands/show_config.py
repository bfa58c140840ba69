"""``bundleforge show-config`` — print the resolved configuration.

Tokens are masked; useful for checking which environment overrides took
effect before running a deploy.
"""

from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from bundleforge.cli.common import configure_logging, console, load_settings, mask
from bundleforge.config import resolve_pipeline_config
from bundleforge.core.errors import ConfigError


def show_config_cmd(
    config_root: str = typer.Option(
        None,
        "--config-root",
        "-c",
        help="Directory holding config.json and deploy_key.",
    ),
) -> None:
    """Show the configuration a deploy would run with."""
    settings = load_settings(config_root)
    configure_logging(settings.log_level)

    try:
        config = resolve_pipeline_config(settings)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    table = Table(title=f"Resolved configuration ({settings.config_file})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    rows = [
        ("repo_url", config.repo_url),
        ("revision", config.revision or "[dim]latest[/dim]"),
        ("project_path", config.project_path or "[dim](root)[/dim]"),
        ("workspace_dir", str(config.workspace_dir)),
        ("dist_path", config.dist_path),
        ("package_manager", config.package_manager),
        (
            "deploy_key",
            str(config.credentials.key_path) if config.credentials else "[dim]none[/dim]",
        ),
        ("assets_upload_url", config.assets_upload_url),
        ("assets_upload_token", mask(config.assets_upload_token)),
        ("bundle_upload_url", config.bundle_upload_url),
        ("bundle_upload_token", mask(config.bundle_upload_token)),
        ("storage_prefix", config.storage_prefix),
        ("app_name", config.app_name),
        ("min_app_version", str(config.min_app_version)),
        ("max_app_version", str(config.max_app_version)),
    ]
    for name, value in rows:
        table.add_row(name, value)

    console.print(table)
