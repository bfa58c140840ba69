"""Pipeline error taxonomy.

Every error is terminal for the run: nothing in the pipeline catches and
retries.  Each error carries the context needed to diagnose the failure
(failing command and exit code, HTTP status, or response body) and
propagates to the CLI, which reports it and exits non-zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


def _format_command(command: Sequence[str]) -> str:
    return " ".join(str(part) for part in command)


def _truncate(body: str, limit: int = 500) -> str:
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class PipelineError(RuntimeError):
    """Base class for every failure that aborts a deployment run."""


class ConfigError(PipelineError):
    """Raised when the configuration file or overrides cannot be resolved."""


class CommandError(PipelineError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        exit_code: int,
        detail: str = "",
    ) -> None:
        self.command = list(command)
        self.exit_code = exit_code
        message = f"{_format_command(command)} exited with code {exit_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SourceFetchError(CommandError):
    """Raised when cloning, checking out or reading HEAD fails."""


class BuildError(CommandError):
    """Raised when the install or build step exits non-zero."""


class VersionParseError(PipelineError):
    """Raised when a version string or project manifest cannot be parsed."""


class ArtifactNotFoundError(PipelineError):
    """Raised when the declared build artifact does not exist after the build."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Build artifact not found: {self.path}")


class UploadError(PipelineError):
    """Raised on an HTTP-level failure talking to the upload or registration API.

    ``status_code`` is ``None`` when no response was received at all
    (connection refused, DNS failure, timeout).
    """

    def __init__(
        self,
        url: str,
        status_code: int | None,
        body: str = "",
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Request to {url} failed without a response"
        else:
            message = f"Request to {url} failed with status {status_code}"
        if body:
            message = f"{message}: {_truncate(body)}"
        super().__init__(message)


class MalformedUploadResponseError(PipelineError):
    """Raised when a successful upload response has no ``data.url``."""

    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__(f"File upload response missing URL: {_truncate(body)}")


class RegistrationError(PipelineError):
    """Raised when the registration API reports an application-level error."""

    def __init__(self, code: Any, body: str) -> None:
        self.code = code
        self.body = body
        super().__init__(
            f"Bundle registration rejected (code={code!r}): {_truncate(body)}"
        )
