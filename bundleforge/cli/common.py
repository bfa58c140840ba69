"""Helpers shared by the CLI commands: settings, logging, the console."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from bundleforge.config import RuntimeSettings

console = Console()


def configure_logging(level: str) -> None:
    """Route all log records through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_settings(
    config_root: str | None = None,
    workspace: str | None = None,
    log_level: str | None = None,
) -> RuntimeSettings:
    """Build RuntimeSettings, letting explicit CLI options win over env vars."""
    explicit: dict[str, Any] = {}
    if config_root:
        explicit["config_root"] = Path(config_root)
    if workspace:
        explicit["workspace_dir"] = Path(workspace)
    if log_level:
        explicit["log_level"] = log_level
    try:
        return RuntimeSettings(**explicit)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid BUNDLEFORGE_* setting:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)


def mask(secret: str) -> str:
    """Hide all but the last four characters of a token."""
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]
