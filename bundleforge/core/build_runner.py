"""Build runner — package manager install and build in the project directory."""

from __future__ import annotations

import logging
from pathlib import Path

from bundleforge.core.errors import BuildError
from bundleforge.core.runner import CommandRunner

logger = logging.getLogger(__name__)


class BuildRunner:
    """Runs ``<package_manager> install`` then ``<package_manager> build``.

    Output is not captured and no timeout applies.
    """

    def __init__(self, runner: CommandRunner, package_manager: str = "pnpm") -> None:
        self._runner = runner
        self.package_manager = package_manager

    def _step(self, subcommand: str, project_dir: Path) -> None:
        command = [self.package_manager, subcommand]
        exit_code = self._runner.run(command, cwd=project_dir)
        if exit_code != 0:
            raise BuildError(command, exit_code)

    def install(self, project_dir: Path) -> None:
        logger.info("Installing dependencies...")
        self._step("install", project_dir)

    def build(self, project_dir: Path) -> None:
        """Install dependencies, then build."""
        self.install(project_dir)
        logger.info("Building project...")
        self._step("build", project_dir)
