"""Branch model and classification results"""
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from github_branch_cleaner.models.pull_request import PullRequestRecord


class BranchOutcome(Enum):
    """PR-based classification of a local branch."""
    NO_PULL_REQUEST = "no-pull-request"
    MERGED = "merged"
    CLOSED_UNMERGED = "closed-unmerged"
    OPEN = "open"
    LOOKUP_ERROR = "lookup-error"


@dataclass(frozen=True)
class LocalBranch:
    """A local branch and the timestamp of its earliest known commit."""
    name: str
    earliest_commit_date: Optional[datetime] = None  # None = couldn't determine

    def is_current(self, current_branch: Optional[str]) -> bool:
        return current_branch is not None and self.name == current_branch


@dataclass(frozen=True)
class DeletionPolicy:
    """Which terminal PR states make a branch eligible for deletion."""
    include_merged: bool = False
    include_closed: bool = False  # closed without merging

    @property
    def selects_anything(self) -> bool:
        return self.include_merged or self.include_closed


@dataclass(frozen=True)
class BranchClassification:
    """Outcome of resolving one branch against GitHub."""
    branch: str
    outcome: BranchOutcome
    pull_request: Optional[PullRequestRecord] = None
    error: Optional[str] = None  # Only set for LOOKUP_ERROR


@dataclass(frozen=True)
class DeletionCandidate:
    """A branch selected for deletion together with the PR that justifies it."""
    branch: str
    pull_request: PullRequestRecord
    reason: str  # "merged" or "closed"


@dataclass(frozen=True)
class DeletionResult:
    """Result of deleting one local branch."""
    branch: str
    deleted: bool
    error: Optional[str] = None
