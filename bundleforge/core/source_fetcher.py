"""Source fetcher — clone the target repository and check out a revision."""

from __future__ import annotations

import logging
from pathlib import Path

from bundleforge.core.errors import SourceFetchError
from bundleforge.core.runner import CommandRunner
from bundleforge.models.bundle import CheckedOutRepository
from bundleforge.models.config import CredentialSource

logger = logging.getLogger(__name__)


class SourceFetcher:
    """Performs a full ``git clone`` followed by an optional ``git checkout``.

    Parameters
    ----------
    runner:
        Executes the git commands.
    credentials:
        Deploy key injected into every git call via ``GIT_SSH_COMMAND``.
        ``None`` leaves git to its default credential handling.
    """

    def __init__(
        self,
        runner: CommandRunner,
        credentials: CredentialSource | None = None,
    ) -> None:
        self._runner = runner
        self._credentials = credentials

    def _git(self, args: list[str], cwd: Path | None = None) -> None:
        command = ["git", *args]
        env = self._credentials.git_env() if self._credentials else None
        exit_code = self._runner.run(command, cwd=cwd, env=env)
        if exit_code != 0:
            raise SourceFetchError(command, exit_code)

    def fetch(
        self,
        repo_url: str,
        dest: Path,
        revision: str | None = None,
        project_path: str = "",
    ) -> CheckedOutRepository:
        """Clone *repo_url* into *dest* and check out *revision* if given.

        Without a revision the clone stays on the default branch tip.
        """
        dest = Path(dest)
        logger.info("Cloning %s at %s", repo_url, revision or "latest")
        self._git(["clone", repo_url, str(dest)])

        if revision:
            self._git(["checkout", revision], cwd=dest)

        logger.info("Clone & checkout completed")
        return CheckedOutRepository(
            root=dest,
            project_dir=dest / project_path,
            requested_revision=revision or None,
        )
