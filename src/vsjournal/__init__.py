"""
vsjournal - Journal and notes kept in a directory synced with a Git remote.
"""

__version__ = "0.1.0"

from .git_ops import (
    # Core functions
    GitRunner,
    is_git_repo,
    current_branch,
    branch_exists,
    probe_repository,
    classify_result,

    # Exceptions
    GitError,
    GitNotInstalledError,
    DirectoryMissingError,
    ProbeError,
    NotAGitRepoError,
    RepoInitError,
    RemoteConfigError,
    BranchBootstrapError,
    FetchOrMergeError,
    StatusQueryError,
    CommitError,
    PushError,

    # Data classes
    ProcessResult,
    RepositoryState,
    GitStep,
    GitOutcome,
)
from .remote import ConfigureOutcome, RemoteConfigurator
from .sync import SyncNote, SyncOrchestrator, SyncReport, SyncState

__all__ = [
    # Core functions
    "GitRunner",
    "is_git_repo",
    "current_branch",
    "branch_exists",
    "probe_repository",
    "classify_result",

    # Exceptions
    "GitError",
    "GitNotInstalledError",
    "DirectoryMissingError",
    "ProbeError",
    "NotAGitRepoError",
    "RepoInitError",
    "RemoteConfigError",
    "BranchBootstrapError",
    "FetchOrMergeError",
    "StatusQueryError",
    "CommitError",
    "PushError",

    # Data classes
    "ProcessResult",
    "RepositoryState",
    "GitStep",
    "GitOutcome",

    # Orchestration
    "RemoteConfigurator",
    "ConfigureOutcome",
    "SyncOrchestrator",
    "SyncReport",
    "SyncState",
    "SyncNote",
]
