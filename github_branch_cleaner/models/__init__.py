"""Data model for github-branch-cleaner."""

from .branch import (
    BranchClassification,
    BranchOutcome,
    DeletionCandidate,
    DeletionPolicy,
    DeletionResult,
    LocalBranch,
)
from .pull_request import PullRequestRecord, PullRequestState, PullRequestSummary

__all__ = [
    "BranchClassification",
    "BranchOutcome",
    "DeletionCandidate",
    "DeletionPolicy",
    "DeletionResult",
    "LocalBranch",
    "PullRequestRecord",
    "PullRequestState",
    "PullRequestSummary",
]
