"""Shared fixtures for vsjournal tests."""

import shutil
import subprocess

import pytest

from vsjournal.git_ops import ProcessResult


class ScriptedRunner:
    """Fake git runner: answers by longest matching argument prefix."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def run(self, args, cwd):
        args = tuple(args)
        self.calls.append(args)
        matches = [prefix for prefix in self.responses if args[:len(prefix)] == prefix]
        if not matches:
            return ProcessResult(args, 0, "", "")
        status, stdout, stderr = self.responses[max(matches, key=len)]
        return ProcessResult(args, status, stdout, stderr)

    def called(self, *prefix):
        return any(call[:len(prefix)] == prefix for call in self.calls)


class RecordingNotifier:
    """Notifier that keeps messages instead of printing them."""

    def __init__(self):
        self.infos = []
        self.errors = []

    def info(self, message):
        self.infos.append(message)

    def error(self, message):
        self.errors.append(message)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def repo_root(tmp_path):
    """Journal root that looks like a Git repository."""
    root = tmp_path / "VSJournal"
    (root / ".git").mkdir(parents=True)
    return root


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    """Isolate real git runs from the user's global configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Journal Tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@journal.local")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Journal Tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@journal.local")
    return home


@pytest.fixture
def bare_remote(tmp_path, git_env):
    """An empty bare repository usable as `origin`."""
    remote = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", str(remote)], capture_output=True, check=True)
    return remote


def git_output(path, *args):
    """Run git in `path` and return stripped stdout."""
    result = subprocess.run(
        ["git", "-C", str(path), *args], capture_output=True, text=True, check=True
    )
    return result.stdout.strip()
