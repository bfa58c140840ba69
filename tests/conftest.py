"""Shared test fixtures for bundleforge."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
import requests

from bundleforge.core.runner import CommandRunner
from bundleforge.models.config import PipelineConfig

ASSETS_URL = "https://assets.example.com/upload"
BUNDLES_URL = "https://api.example.com/bundles"
HEAD_SHA = "3f786850e387550fdab836ed7e6dc881de23001b"
BUNDLE_BYTES = b"\x00lynx-bundle\x01payload"

# Environment variables the resolver reads; cleared for every test.
DEPLOY_ENV_VARS = (
    "PROJECT_PATH",
    "REPO_URL",
    "BUILD_COMMIT",
    "APP_NAME",
    "MIN_APP_VERSION",
    "MAX_APP_VERSION",
)


@pytest.fixture(autouse=True)
def clean_deploy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host's CI variables out of the tests."""
    for name in DEPLOY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in ("BUNDLEFORGE_CONFIG_ROOT", "BUNDLEFORGE_WORKSPACE_DIR", "BUNDLEFORGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeRunner(CommandRunner):
    """Records commands instead of executing them.

    ``exit_codes`` maps a command prefix (``"git clone"``, ``"pnpm build"``)
    to the exit status to report.  ``hooks`` maps a prefix to a callable run
    with ``(command, cwd)`` before returning, to simulate side effects such
    as the clone creating files.
    """

    def __init__(
        self,
        *,
        head: str = HEAD_SHA,
        exit_codes: Mapping[str, int] | None = None,
        hooks: Mapping[str, Callable[[list[str], Path | None], None]] | None = None,
    ) -> None:
        self.head = head
        self.exit_codes = dict(exit_codes or {})
        self.hooks = dict(hooks or {})
        self.calls: list[dict[str, Any]] = []

    def _match(self, table: Mapping[str, Any], command: list[str]) -> Any:
        joined = " ".join(command)
        for prefix, value in table.items():
            if joined == prefix or joined.startswith(prefix + " "):
                return value
        return None

    def _record(
        self, command: Sequence[str], cwd: Path | None, env: Mapping[str, str] | None
    ) -> int:
        command = list(command)
        self.calls.append({"command": command, "cwd": cwd, "env": dict(env or {})})
        hook = self._match(self.hooks, command)
        if hook is not None:
            hook(command, cwd)
        code = self._match(self.exit_codes, command)
        return 0 if code is None else code

    def run(self, command, cwd=None, env=None) -> int:
        return self._record(command, cwd, env)

    def capture(self, command, cwd=None, env=None) -> tuple[int, str]:
        code = self._record(command, cwd, env)
        if list(command)[:2] == ["git", "rev-parse"] and code == 0:
            return code, f"{self.head}\n"
        return code, ""

    @property
    def commands(self) -> list[str]:
        return [" ".join(call["command"]) for call in self.calls]


def write_project(
    root: Path,
    project_path: str = "app",
    manifest: dict[str, Any] | None = None,
) -> Path:
    """Write a minimal JS project with a package.json under *root*."""
    project_dir = root / project_path
    project_dir.mkdir(parents=True, exist_ok=True)
    if manifest is None:
        manifest = {
            "name": "demo-app",
            "version": "1.2.3",
            "bundleConfig": {"bundleName": "main.lynx.bundle", "preset": True},
        }
    (project_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    return project_dir


@pytest.fixture
def bundle_bytes() -> bytes:
    """The bytes the fake build writes as the bundle."""
    return BUNDLE_BYTES


@pytest.fixture
def head_sha() -> str:
    """The commit the fake ``git rev-parse HEAD`` reports."""
    return HEAD_SHA


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Factory fixture: a FakeRunner whose clone and build touch the disk.

    ``git clone`` writes the project manifest into the destination and
    ``<pm> build`` writes ``dist/main.lynx.bundle`` in the project directory.
    """

    def _factory(
        *,
        project_path: str = "app",
        manifest: dict[str, Any] | None = None,
        bundle: bytes | None = BUNDLE_BYTES,
        **kwargs: Any,
    ) -> FakeRunner:
        def _clone(command: list[str], cwd: Path | None) -> None:
            write_project(Path(command[-1]), project_path, manifest)

        def _build(command: list[str], cwd: Path | None) -> None:
            if bundle is None or cwd is None:
                return
            dist = Path(cwd) / "dist"
            dist.mkdir(parents=True, exist_ok=True)
            (dist / "main.lynx.bundle").write_bytes(bundle)

        hooks = {"git clone": _clone, "pnpm build": _build}
        hooks.update(kwargs.pop("hooks", {}) or {})
        return FakeRunner(hooks=hooks, **kwargs)

    return _factory


# ---------------------------------------------------------------------------
# Fake HTTP session
# ---------------------------------------------------------------------------


def make_response(
    status_code: int = 200,
    payload: Any = None,
    *,
    text: str | None = None,
) -> requests.Response:
    """Build a real ``requests.Response`` with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeSession(requests.Session):
    """A ``requests.Session`` that replays canned responses per URL.

    Each queued item is either a ``requests.Response`` or an exception to
    raise.  Every call is recorded in ``calls``.
    """

    def __init__(self, routes: Mapping[str, list[Any]] | None = None) -> None:
        super().__init__()
        self.routes: dict[str, list[Any]] = {
            url: list(items) for url, items in (routes or {}).items()
        }
        self.calls: list[dict[str, Any]] = []

    def post(self, url, data=None, json=None, **kwargs):  # type: ignore[override]
        self.calls.append({"url": url, "data": data, "json": json, **kwargs})
        queue = self.routes.get(url)
        if not queue:
            raise AssertionError(f"Unexpected POST to {url}")
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]


@pytest.fixture
def upload_ok() -> requests.Response:
    return make_response(
        200, {"data": {"url": "https://cdn.example.com/lynxbundles/abc.bundle"}}
    )


@pytest.fixture
def register_ok() -> requests.Response:
    return make_response(200, {"code": 0, "data": {"id": 42, "status": "active"}})


@pytest.fixture
def make_session(
    upload_ok: requests.Response, register_ok: requests.Response
) -> Callable[..., FakeSession]:
    """Factory fixture: a FakeSession with happy-path defaults for both URLs."""

    def _factory(
        upload: list[Any] | None = None,
        register: list[Any] | None = None,
    ) -> FakeSession:
        return FakeSession({
            ASSETS_URL: upload if upload is not None else [upload_ok],
            BUNDLES_URL: register if register is not None else [register_ok],
        })

    return _factory


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., PipelineConfig]:
    """Factory fixture: a PipelineConfig pointing at a temp workspace."""

    def _factory(**overrides: Any) -> PipelineConfig:
        defaults: dict[str, Any] = {
            "repo_url": "git@github.com:example/demo-app.git",
            "revision": None,
            "project_path": "app",
            "workspace_dir": tmp_path / "repo",
            "dist_path": "dist/main.lynx.bundle",
            "assets_upload_url": ASSETS_URL,
            "assets_upload_token": "assets-secret-token",
            "bundle_upload_url": BUNDLES_URL,
            "bundle_upload_token": "bundles-secret-token",
        }
        defaults.update(overrides)
        return PipelineConfig(**defaults)

    return _factory


@pytest.fixture
def pipeline_config(make_config: Callable[..., PipelineConfig]) -> PipelineConfig:
    """Convenience: a ready-made PipelineConfig with test defaults."""
    return make_config()


@pytest.fixture
def http_response() -> Callable[..., requests.Response]:
    """Factory fixture: see :func:`make_response`."""
    return make_response


@pytest.fixture
def session_for() -> Callable[..., FakeSession]:
    """Factory fixture: a FakeSession for an explicit ``{url: [responses]}`` map."""

    def _factory(routes: Mapping[str, list[Any]] | None = None) -> FakeSession:
        return FakeSession(routes)

    return _factory
