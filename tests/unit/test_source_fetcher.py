"""Tests for the SourceFetcher: clone, checkout and credential injection."""

from __future__ import annotations

import shlex
from pathlib import Path

import pytest

from bundleforge.core.errors import SourceFetchError
from bundleforge.core.source_fetcher import SourceFetcher
from bundleforge.models.config import CredentialSource

REPO = "git@github.com:example/demo-app.git"


class TestFetch:
    def test_clone_without_revision_skips_checkout(self, tmp_path: Path, make_runner):
        runner = make_runner()
        dest = tmp_path / "repo"
        checkout = SourceFetcher(runner).fetch(REPO, dest)

        assert runner.commands == [f"git clone {REPO} {dest}"]
        assert checkout.root == dest
        assert checkout.requested_revision is None

    def test_clone_then_checkout_revision(self, tmp_path: Path, make_runner):
        runner = make_runner()
        dest = tmp_path / "repo"
        checkout = SourceFetcher(runner).fetch(REPO, dest, "abc123", project_path="app")

        assert runner.commands == [f"git clone {REPO} {dest}", "git checkout abc123"]
        assert runner.calls[1]["cwd"] == dest
        assert checkout.project_dir == dest / "app"
        assert checkout.requested_revision == "abc123"

    def test_empty_revision_treated_as_latest(self, tmp_path: Path, make_runner):
        runner = make_runner()
        SourceFetcher(runner).fetch(REPO, tmp_path / "repo", "")
        assert len(runner.calls) == 1


class TestFailures:
    def test_clone_failure_raises_with_command_and_code(self, tmp_path: Path, make_runner):
        runner = make_runner(exit_codes={"git clone": 128})
        with pytest.raises(SourceFetchError) as exc_info:
            SourceFetcher(runner).fetch(REPO, tmp_path / "repo", "main")

        err = exc_info.value
        assert err.exit_code == 128
        assert err.command[:2] == ["git", "clone"]
        assert "exited with code 128" in str(err)
        # no checkout after a failed clone
        assert len(runner.calls) == 1

    def test_checkout_failure(self, tmp_path: Path, make_runner):
        runner = make_runner(exit_codes={"git checkout": 1})
        with pytest.raises(SourceFetchError) as exc_info:
            SourceFetcher(runner).fetch(REPO, tmp_path / "repo", "nope")
        assert exc_info.value.command == ["git", "checkout", "nope"]
        assert exc_info.value.exit_code == 1


class TestCredentials:
    def test_no_credentials_passes_no_env(self, tmp_path: Path, make_runner):
        runner = make_runner()
        SourceFetcher(runner).fetch(REPO, tmp_path / "repo", "main")
        assert all(call["env"] == {} for call in runner.calls)

    def test_key_injected_into_every_git_call(self, tmp_path: Path, make_runner):
        key = tmp_path / "deploy_key"
        runner = make_runner()
        fetcher = SourceFetcher(runner, credentials=CredentialSource(key_path=key))
        fetcher.fetch(REPO, tmp_path / "repo", "main")

        assert len(runner.calls) == 2
        for call in runner.calls:
            ssh = call["env"]["GIT_SSH_COMMAND"]
            assert ssh.startswith(f"ssh -i {shlex.quote(str(key))} ")
            assert "-o IdentitiesOnly=yes" in ssh
            assert "-o StrictHostKeyChecking=no" in ssh
