"""Child-process execution for git and the package manager.

Commands inherit this process's stdout and stderr so build progress streams
straight to the terminal.  There is no timeout: a hung child blocks the run.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

# Exit status reported when the executable itself cannot be started,
# following the shell convention for "command not found".
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs external commands and reports their exit status.

    The runner never raises on a non-zero exit; callers turn exit codes into
    their own error types.  It is the only place in the pipeline that touches
    the process environment, merging ``os.environ`` with per-call overrides.
    """

    def _child_env(self, env: Mapping[str, str] | None) -> dict[str, str] | None:
        if not env:
            return None
        merged = dict(os.environ)
        merged.update(env)
        return merged

    def run(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run *command* with inherited output streams; return its exit code."""
        logger.debug("exec: %s (cwd=%s)", " ".join(command), cwd or ".")
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=self._child_env(env),
                check=False,
            )
        except FileNotFoundError:
            logger.error("Executable not found: %s", command[0])
            return COMMAND_NOT_FOUND
        return completed.returncode

    def capture(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> tuple[int, str]:
        """Run *command* capturing stdout; stderr still goes to the terminal."""
        logger.debug("exec (capture): %s (cwd=%s)", " ".join(command), cwd or ".")
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=self._child_env(env),
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.error("Executable not found: %s", command[0])
            return COMMAND_NOT_FOUND, ""
        return completed.returncode, completed.stdout or ""
