"""
Remote configuration for the journal repository.

Makes sure the journal root is a Git repository with an `origin` remote
pointing at the URL the user supplies and with the primary branch checked out.
Every step accepts a repository that is already in the desired state, so the
configuration can be re-run at any time.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .git_ops import (
    BranchBootstrapError,
    DirectoryMissingError,
    GitError,
    GitOutcome,
    GitRunner,
    GitStep,
    NotAGitRepoError,
    ProbeError,
    ProcessResult,
    RemoteConfigError,
    RepoInitError,
    branch_exists,
    classify_result,
    current_branch,
    is_git_repo,
)
from .notify import ConsoleNotifier, Notifier
from .settings import PRIMARY_BRANCH, REMOTE_NAME

logger = logging.getLogger(__name__)


class ConfigureOutcome(Enum):
    """How a configure-remote run ended."""

    CONFIGURED = "configured"
    CANCELLED = "cancelled"
    FAILED = "failed"


class RemoteConfigurator:
    """Bind the journal repository to a single remote."""

    def __init__(
        self,
        root: Path,
        runner: Optional[GitRunner] = None,
        notifier: Optional[Notifier] = None,
        remote_name: str = REMOTE_NAME,
        primary_branch: str = PRIMARY_BRANCH,
    ) -> None:
        self.root = root
        self.runner = runner or GitRunner()
        self.notifier = notifier or ConsoleNotifier()
        self.remote_name = remote_name
        self.primary_branch = primary_branch

    def configure(self, ask_remote_url: Callable[[], Optional[str]]) -> ConfigureOutcome:
        """
        Initialize the repository, replace the remote and check out the primary branch.

        Args:
            ask_remote_url: Called once the repository exists; returns the
                remote URL, or None/blank when the user cancels

        Returns:
            CONFIGURED, CANCELLED (no notification) or FAILED (one error notified)
        """
        try:
            if not self.root.is_dir():
                raise DirectoryMissingError(
                    f"directory {self.root} does not exist. Please create it first."
                )
            self._init_repo()

            remote_url = ask_remote_url()
            if not remote_url or not remote_url.strip():
                logger.info("No remote URL given, leaving remote unchanged")
                return ConfigureOutcome.CANCELLED

            self._replace_remote(remote_url.strip())
            self.notifier.info("Git remote set successfully.")
            self._checkout_primary_branch()
        except GitError as e:
            self.notifier.error(e.message)
            return ConfigureOutcome.FAILED

        return ConfigureOutcome.CONFIGURED

    def _git(self, *args: str) -> ProcessResult:
        return self.runner.run(args, self.root)

    def _init_repo(self) -> None:
        if is_git_repo(self.root):
            logger.debug(f"Git repository already exists at: {self.root}")
            return

        result = self._git("init")
        if not result.ok:
            raise RepoInitError(f"Failed to initialize Git repository: {result.output}")
        logger.info(f"Initialized Git repository at: {self.root}")

    def _replace_remote(self, url: str) -> None:
        removed = self._git("remote", "remove", self.remote_name)
        if not removed.ok:
            logger.debug(f"No '{self.remote_name}' remote to remove")

        result = self._git("remote", "add", self.remote_name, url)
        if not result.ok:
            raise RemoteConfigError(f"Failed to set Git remote: {result.output}")
        logger.info(f"Set remote '{self.remote_name}': {url}")

    def _checkout_primary_branch(self) -> None:
        try:
            branch = current_branch(self.runner, self.root)
        except NotAGitRepoError:
            # No commits yet: HEAD can simply be pointed at a new branch
            self._create_primary_branch()
            return
        except ProbeError as e:
            raise BranchBootstrapError(e.message) from e

        if branch == self.primary_branch:
            logger.debug(f"Already on {self.primary_branch}")
            return

        if branch_exists(self.runner, self.root, self.primary_branch):
            result = self._git("checkout", self.primary_branch)
            if not result.ok:
                raise BranchBootstrapError(
                    f"Failed to switch to {self.primary_branch} branch: {result.output}"
                )
            self.notifier.info(f"Switched to {self.primary_branch} branch.")
        else:
            self._create_primary_branch()

    def _create_primary_branch(self) -> None:
        result = self._git("checkout", "-b", self.primary_branch)
        if classify_result(GitStep.CREATE_BRANCH, result) is not GitOutcome.SUCCESS:
            raise BranchBootstrapError(
                f"Failed to create {self.primary_branch} branch: {result.output}"
            )
        self.notifier.info(f"Switched to {self.primary_branch} branch.")
