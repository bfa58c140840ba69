"""``bundleforge version-code VERSION`` — print a version's integer code."""

from __future__ import annotations

import typer
from rich.markup import escape

from bundleforge.cli.common import console
from bundleforge.core.errors import VersionParseError
from bundleforge.core.revision import parse_version


def version_code_cmd(
    version: str = typer.Argument(..., help="Semantic version, e.g. 1.2.3."),
) -> None:
    """Print the version code used to order bundles."""
    try:
        parsed = parse_version(version)
    except VersionParseError as exc:
        console.print(f"[bold red]Invalid version:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    console.print(str(parsed.code), highlight=False)
