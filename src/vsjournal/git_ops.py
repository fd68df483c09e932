"""
Git operations module for vsjournal.

Runs the git executable as an opaque subprocess through GitPython's command
layer, probes the state of the journal repository and classifies the outcomes
git only reports as text.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

# GitPython refuses to import without a git executable; entries need no git,
# and GitRunner.run reports the missing executable itself
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

import git  # noqa: E402
from git.exc import GitCommandNotFound  # noqa: E402

from .settings import PUSH_UP_TO_DATE_STATUS

# Configure logging
logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


class GitError(Exception):
    """Base exception for Git operations."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class GitNotInstalledError(GitError):
    """Raised when Git is not installed or not in PATH."""
    pass


class DirectoryMissingError(GitError):
    """Raised when the journal root directory does not exist."""
    pass


class ProbeError(GitError):
    """Raised when a repository state query fails."""
    pass


class NotAGitRepoError(ProbeError):
    """Raised when HEAD cannot be resolved: no repository, or no commits yet."""
    pass


class RepoInitError(GitError):
    """Raised when `git init` fails."""
    pass


class RemoteConfigError(GitError):
    """Raised when the remote cannot be added."""
    pass


class BranchBootstrapError(GitError):
    """Raised when the primary branch cannot be created or checked out."""
    pass


class FetchOrMergeError(GitError):
    """Raised when fetching or merging remote changes fails."""
    pass


class StatusQueryError(GitError):
    """Raised when the working tree status cannot be read."""
    pass


class CommitError(GitError):
    """Raised when staging or committing fails."""
    pass


class PushError(GitError):
    """Raised when push fails."""
    pass


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a single git invocation."""

    args: tuple[str, ...]
    status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status == 0

    @property
    def output(self) -> str:
        """Git's own diagnostic text, preferring stderr."""
        return (self.stderr or self.stdout).strip()

    def __str__(self) -> str:
        return f"git {' '.join(self.args)} (exit {self.status})"


def _non_interactive_env() -> dict[str, str]:
    env = {"GIT_TERMINAL_PROMPT": "0"}
    if "GIT_SSH_COMMAND" not in os.environ:
        env["GIT_SSH_COMMAND"] = "ssh -o BatchMode=yes"
    return env


class GitRunner:
    """Run git commands in an explicit working directory.

    A non-zero exit status is returned, never raised; callers decide what it
    means. Stdin is not inherited and credential prompts are disabled, so a
    remote that needs interactive authentication fails instead of waiting.
    """

    def __init__(self, git_executable: str = "git") -> None:
        self.git_executable = git_executable

    def run(self, args: Sequence[str], cwd: Union[str, Path]) -> ProcessResult:
        command = [self.git_executable, *args]
        try:
            status, stdout, stderr = git.Git(str(cwd)).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                env=_non_interactive_env(),
            )
        except GitCommandNotFound as e:
            raise GitNotInstalledError(
                "Git is not installed or not in PATH",
                "Please install Git: https://git-scm.com/downloads"
            ) from e

        result = ProcessResult(tuple(args), status, stdout, stderr)
        if result.ok and stderr:
            # Progress and hints land on stderr even when the command succeeds
            logger.debug(f"{result} stderr: {stderr}")
        elif not result.ok:
            logger.debug(f"{result} failed: {result.output}")
        return result


def is_git_repo(path: Union[str, Path]) -> bool:
    """Check if a directory holds a Git repository."""
    return (Path(path) / GIT_DIR_NAME).exists()


def current_branch(runner: GitRunner, path: Union[str, Path]) -> str:
    """
    Get the abbreviated name of the checked out branch.

    Args:
        runner: Process runner used for the query
        path: Repository root

    Returns:
        Branch name as reported by `git rev-parse --abbrev-ref HEAD`

    Raises:
        NotAGitRepoError: If HEAD does not resolve (no commits yet, or no repository)
        GitNotInstalledError: If Git is not installed
        ProbeError: For any other failure
    """
    result = runner.run(["rev-parse", "--abbrev-ref", "HEAD"], path)
    if result.ok:
        return result.stdout.strip()

    text = result.output
    if UNKNOWN_REVISION in text or NOT_A_REPOSITORY in text.lower():
        raise NotAGitRepoError(
            f"Cannot resolve HEAD in '{path}': {text}",
            "The repository has no commits yet"
        )
    raise ProbeError(f"Failed to get current branch: {text}")


def branch_exists(runner: GitRunner, path: Union[str, Path], branch: str) -> bool:
    """Check whether a local ref resolves, via `git rev-parse --verify`."""
    return runner.run(["rev-parse", "--verify", branch], path).ok


@dataclass(frozen=True)
class RepositoryState:
    """Repository state as seen right now. Never cached."""

    exists: bool
    current_branch: Optional[str] = None


def probe_repository(runner: GitRunner, path: Union[str, Path]) -> RepositoryState:
    """Query whether `path` is a repository and which branch it is on."""
    if not is_git_repo(path):
        return RepositoryState(exists=False)
    try:
        branch = current_branch(runner, path)
    except NotAGitRepoError:
        branch = None
    return RepositoryState(exists=True, current_branch=branch)


# Sentinel texts from git's C-locale messages (GitPython runs git with LC_ALL=C).
# They are a compatibility risk: git may reword them between releases.
UNKNOWN_REVISION = "unknown revision or path not in the working tree"
NOT_A_REPOSITORY = "not a git repository"
SWITCHED_TO_NEW_BRANCH = "Switched to a new branch"
EVERYTHING_UP_TO_DATE = "Everything up-to-date"

_UPSTREAM_MISSING = (
    re.compile(r"the requested upstream branch '[^']+' does not exist", re.IGNORECASE),
    re.compile(r"couldn't find remote ref", re.IGNORECASE),
)
_BRANCH_UNBORN = (
    re.compile(r"no commit on branch '[^']+' yet", re.IGNORECASE),
    re.compile(r"branch '[^']+' does not exist", re.IGNORECASE),
)


class GitStep(Enum):
    """Commands whose failures are not always failures."""

    SET_UPSTREAM = "set_upstream"
    PULL = "pull"
    PUSH = "push"
    CREATE_BRANCH = "create_branch"


class GitOutcome(Enum):
    """Classified result of a git command."""

    SUCCESS = "success"
    FAILURE = "failure"
    NO_UPSTREAM_YET = "no_upstream_yet"
    BRANCH_UNBORN = "branch_unborn"
    NOTHING_TO_PUSH = "nothing_to_push"


def classify_result(step: GitStep, result: ProcessResult) -> GitOutcome:
    """
    Classify a git result by exit status and the known sentinel messages.

    This is the only place that interprets git's message text.

    Args:
        step: The command the result belongs to
        result: Captured result of that command

    Returns:
        The outcome the caller should act on
    """
    text = f"{result.stderr}\n{result.stdout}"

    if step is GitStep.PUSH:
        if result.status == PUSH_UP_TO_DATE_STATUS:
            return GitOutcome.NOTHING_TO_PUSH
        if result.ok and EVERYTHING_UP_TO_DATE in text:
            return GitOutcome.NOTHING_TO_PUSH

    if step is GitStep.CREATE_BRANCH and SWITCHED_TO_NEW_BRANCH in text:
        return GitOutcome.SUCCESS

    if result.ok:
        return GitOutcome.SUCCESS

    if step in (GitStep.SET_UPSTREAM, GitStep.PULL):
        if any(pattern.search(text) for pattern in _UPSTREAM_MISSING):
            return GitOutcome.NO_UPSTREAM_YET
        if step is GitStep.SET_UPSTREAM and any(pattern.search(text) for pattern in _BRANCH_UNBORN):
            return GitOutcome.BRANCH_UNBORN

    return GitOutcome.FAILURE
