"""bundleforge CLI — Typer-based command-line interface.

Provides the ``bundleforge`` command with subcommands for running a
deployment, inspecting the resolved configuration, and computing version
codes.

All output uses Rich for formatted terminal display.
"""
