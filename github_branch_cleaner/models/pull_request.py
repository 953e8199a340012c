"""Pull request snapshots fetched from GitHub"""
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class PullRequestState(Enum):
    """State of a pull request as reported by GitHub."""
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class PullRequestSummary:
    """Partial pull request as returned by list and search endpoints.

    These results do not carry a reliable ``merged`` flag; use
    ``GitHubService.get_pull_request_details`` to obtain a PullRequestRecord.
    Search hits have no ``head_ref``. ``head_label`` is ``<owner>:<branch>``
    of the head repository, which tells a fork's branch from one of the same
    name in the base repository.
    """
    number: int
    head_ref: Optional[str]
    state: PullRequestState
    title: str = ""
    updated_at: Optional[datetime] = None
    head_label: Optional[str] = None

    def is_head_of(self, branch_name: str, owner: Optional[str] = None) -> bool:
        """True if this PR was opened from ``branch_name`` in ``owner``'s repository.

        Without an owner, or without a known head label, only the branch name
        is compared.
        """
        if self.head_ref != branch_name:
            return False
        if owner is None or self.head_label is None:
            return True
        return self.head_label == f"{owner}:{branch_name}"


@dataclass(frozen=True)
class PullRequestRecord:
    """Full pull request details, authoritative for ``merged``."""
    number: int
    head_ref: str
    state: PullRequestState
    merged: bool
    title: str = ""
    updated_at: Optional[datetime] = None
    html_url: Optional[str] = None
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.merged and self.state != PullRequestState.CLOSED:
            raise ValueError(f"PR #{self.number} is merged but its state is {self.state.value}")

    @property
    def is_closed_unmerged(self) -> bool:
        return self.state == PullRequestState.CLOSED and not self.merged
