"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bundleforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from bundleforge.cli.commands.deploy import deploy_cmd
from bundleforge.cli.commands.show_config import show_config_cmd
from bundleforge.cli.commands.version_code import version_code_cmd

app = typer.Typer(
    name="bundleforge",
    help="bundleforge: clone, build, hash, upload and register an app bundle.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="deploy", help="Build and publish a bundle.")(deploy_cmd)
app.command(name="show-config", help="Show the resolved configuration.")(show_config_cmd)
app.command(name="version-code", help="Print the version code for a version string.")(
    version_code_cmd
)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
