"""
Sync pipeline for the journal repository.

A sync is one run of a small state machine:

    IDLE -> PREFLIGHT -> PULLING -> {NOTHING_TO_SYNC | COMMITTING} -> PUSHING -> DONE

Each stage returns a StageOutcome. A single driver loop consumes them and
stops at the first SKIP_REMAINING or ABORT. Any stage can end the run in
FAILED. Nothing is retried and nothing survives between runs.

On conflicting lines the remote's version wins (`-X theirs`), so a local edit
that conflicts with a remote edit is discarded by the merge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .git_ops import (
    BranchBootstrapError,
    CommitError,
    DirectoryMissingError,
    FetchOrMergeError,
    GitError,
    GitOutcome,
    GitRunner,
    GitStep,
    NotAGitRepoError,
    ProcessResult,
    PushError,
    StatusQueryError,
    branch_exists,
    classify_result,
    is_git_repo,
)
from .notify import ConsoleNotifier, Notifier
from .settings import PRIMARY_BRANCH, REMOTE_NAME, SYNC_COMMIT_MESSAGE

logger = logging.getLogger(__name__)


class SyncState(Enum):
    """Where a sync run is, or where it ended."""

    IDLE = "idle"
    PREFLIGHT = "preflight"
    PULLING = "pulling"
    NOTHING_TO_SYNC = "nothing_to_sync"
    COMMITTING = "committing"
    PUSHING = "pushing"
    DONE = "done"
    FAILED = "failed"


class SyncNote(Enum):
    """Conditions that look like failures but are not."""

    NO_UPSTREAM_YET = "no_upstream_yet"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    NOTHING_TO_PUSH = "nothing_to_push"


class Step(Enum):
    CONTINUE = "continue"
    SKIP_REMAINING = "skip_remaining"
    ABORT = "abort"


@dataclass(frozen=True)
class StageOutcome:
    """Tagged result of one pipeline stage."""

    step: Step
    reason: Optional[str] = None
    error: Optional[GitError] = None

    @classmethod
    def proceed(cls) -> "StageOutcome":
        return cls(Step.CONTINUE)

    @classmethod
    def skip(cls, reason: str) -> "StageOutcome":
        return cls(Step.SKIP_REMAINING, reason=reason)

    @classmethod
    def abort(cls, error: GitError) -> "StageOutcome":
        return cls(Step.ABORT, error=error)


@dataclass
class SyncReport:
    """What a sync run did."""

    root: Path
    state: SyncState = SyncState.IDLE
    error: Optional[GitError] = None
    notes: list[SyncNote] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state in (SyncState.DONE, SyncState.NOTHING_TO_SYNC)


class SyncOrchestrator:
    """Publish local changes and merge remote ones for the journal root."""

    def __init__(
        self,
        root: Path,
        runner: Optional[GitRunner] = None,
        notifier: Optional[Notifier] = None,
        remote_name: str = REMOTE_NAME,
        primary_branch: str = PRIMARY_BRANCH,
        commit_message: str = SYNC_COMMIT_MESSAGE,
    ) -> None:
        self.root = root
        self.runner = runner or GitRunner()
        self.notifier = notifier or ConsoleNotifier()
        self.remote_name = remote_name
        self.primary_branch = primary_branch
        self.commit_message = commit_message

    @property
    def upstream(self) -> str:
        return f"{self.remote_name}/{self.primary_branch}"

    def sync(self) -> SyncReport:
        """Run the whole pipeline once and report the outcome to the notifier."""
        report = SyncReport(root=self.root, state=SyncState.PREFLIGHT)

        try:
            self._preflight()
        except GitError as e:
            return self._fail(report, e)

        self.notifier.info("Syncing remote repository...")

        for state, stage in self._stages():
            report.state = state
            logger.debug(f"Sync stage: {stage.__name__}")
            try:
                outcome = stage(report)
            except GitError as e:
                outcome = StageOutcome.abort(e)

            if outcome.step is Step.ABORT:
                return self._fail(report, outcome.error)
            if outcome.step is Step.SKIP_REMAINING:
                report.state = SyncState.NOTHING_TO_SYNC
                self.notifier.info(outcome.reason)
                return report

        report.state = SyncState.DONE
        self.notifier.info("Changes synced to remote repository")
        return report

    def _stages(self) -> list[tuple[SyncState, Callable[[SyncReport], StageOutcome]]]:
        return [
            (SyncState.PULLING, self._pull),
            (SyncState.PULLING, self._detect_changes),
            (SyncState.COMMITTING, self._commit),
            (SyncState.PUSHING, self._ensure_primary_branch),
            (SyncState.PUSHING, self._push),
        ]

    def _fail(self, report: SyncReport, error: GitError) -> SyncReport:
        logger.debug(f"Sync failed while {report.state.value}: {error.message}")
        report.state = SyncState.FAILED
        report.error = error
        self.notifier.error(error.message)
        return report

    def _git(self, *args: str) -> ProcessResult:
        return self.runner.run(args, self.root)

    def _preflight(self) -> None:
        if not self.root.is_dir():
            raise DirectoryMissingError(
                f"directory {self.root} does not exist. Please create it first."
            )
        if not is_git_repo(self.root):
            raise NotAGitRepoError(
                "Please run configure-remote before sync.",
                f"'{self.root}' is not a Git repository"
            )

    def _pull(self, report: SyncReport) -> StageOutcome:
        fetch = self._git("fetch", self.remote_name)
        if not fetch.ok:
            return StageOutcome.abort(
                FetchOrMergeError(f"Failed to fetch from {self.remote_name}: {fetch.output}")
            )

        track = self._git(
            "branch", f"--set-upstream-to={self.upstream}", self.primary_branch
        )
        outcome = classify_result(GitStep.SET_UPSTREAM, track)
        if outcome is GitOutcome.NO_UPSTREAM_YET:
            return self._no_upstream_yet(report)
        if outcome is GitOutcome.BRANCH_UNBORN:
            # Tracking is set up by the first push instead
            logger.info(f"{self.primary_branch} has no commits yet, skipping tracking")
        elif outcome is GitOutcome.FAILURE:
            return StageOutcome.abort(
                FetchOrMergeError(f"Failed to track {self.upstream}: {track.output}")
            )

        config = self._git("config", "pull.rebase", "false")
        if not config.ok:
            return StageOutcome.abort(
                FetchOrMergeError(f"Failed to configure pull: {config.output}")
            )

        pull = self._git(
            "pull",
            "--strategy=recursive",
            "-X",
            "theirs",
            "--allow-unrelated-histories",
            self.remote_name,
            self.primary_branch,
        )
        outcome = classify_result(GitStep.PULL, pull)
        if outcome is GitOutcome.NO_UPSTREAM_YET:
            return self._no_upstream_yet(report)
        if outcome is GitOutcome.FAILURE:
            return StageOutcome.abort(
                FetchOrMergeError(f"Failed to merge remote changes: {pull.output}")
            )

        logger.info(f"Merged {self.upstream}")
        return StageOutcome.proceed()

    def _no_upstream_yet(self, report: SyncReport) -> StageOutcome:
        logger.info(f"{self.upstream} does not exist yet, skipping merge")
        report.notes.append(SyncNote.NO_UPSTREAM_YET)
        return StageOutcome.proceed()

    def _detect_changes(self, report: SyncReport) -> StageOutcome:
        status = self._git("status", "--porcelain")
        if not status.ok:
            return StageOutcome.abort(
                StatusQueryError(f"Failed to check for changes: {status.output}")
            )

        if not status.stdout.strip():
            report.notes.append(SyncNote.NOTHING_TO_COMMIT)
            return StageOutcome.skip("No changes to sync.")

        logger.info(f"{len(status.stdout.strip().splitlines())} changed path(s) to sync")
        return StageOutcome.proceed()

    def _commit(self, report: SyncReport) -> StageOutcome:
        for args in (("add", "--all"), ("commit", "-m", self.commit_message)):
            result = self._git(*args)
            if not result.ok:
                return StageOutcome.abort(
                    CommitError(f"Failed to commit changes: {result.output}")
                )

        logger.info(f"Committed: {self.commit_message}")
        return StageOutcome.proceed()

    def _ensure_primary_branch(self, report: SyncReport) -> StageOutcome:
        if branch_exists(self.runner, self.root, self.primary_branch):
            return StageOutcome.proceed()

        result = self._git("checkout", "-b", self.primary_branch)
        if classify_result(GitStep.CREATE_BRANCH, result) is not GitOutcome.SUCCESS:
            return StageOutcome.abort(
                BranchBootstrapError(
                    f"Failed to create {self.primary_branch} branch: {result.output}"
                )
            )

        logger.info(f"Created {self.primary_branch} from the current commit")
        return StageOutcome.proceed()

    def _push(self, report: SyncReport) -> StageOutcome:
        push = self._git("push", "--set-upstream", self.remote_name, self.primary_branch)
        outcome = classify_result(GitStep.PUSH, push)
        if outcome is GitOutcome.NOTHING_TO_PUSH:
            if push.ok:
                logger.info("Nothing to push (up to date)")
            else:
                # Status 128 also covers fatal errors such as refused credentials
                logger.warning(f"Push exited with {push.status}, treated as up to date: {push.output}")
            report.notes.append(SyncNote.NOTHING_TO_PUSH)
        elif outcome is GitOutcome.FAILURE:
            return StageOutcome.abort(
                PushError(f"Failed to push changes to remote repository: {push.output}")
            )
        else:
            logger.info(f"Pushed {self.primary_branch} to {self.remote_name}")
        return StageOutcome.proceed()
