"""Aggregation of branch classifications"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from github_branch_cleaner.models.branch import (
    BranchClassification,
    BranchOutcome,
    DeletionCandidate,
    DeletionPolicy,
)
from github_branch_cleaner.services.branch_matcher import BranchMatcher


@dataclass
class ClassificationReport:
    """Branch classifications grouped by outcome, in input order."""

    classifications: List[BranchClassification] = field(default_factory=list)

    @classmethod
    def from_classifications(
        cls, classifications: Iterable[BranchClassification]
    ) -> "ClassificationReport":
        return cls(list(classifications))

    def _group(self, outcome: BranchOutcome) -> List[BranchClassification]:
        return [c for c in self.classifications if c.outcome == outcome]

    @property
    def merged(self) -> List[BranchClassification]:
        return self._group(BranchOutcome.MERGED)

    @property
    def closed_unmerged(self) -> List[BranchClassification]:
        return self._group(BranchOutcome.CLOSED_UNMERGED)

    @property
    def open(self) -> List[BranchClassification]:
        return self._group(BranchOutcome.OPEN)

    @property
    def no_pull_request(self) -> List[BranchClassification]:
        return self._group(BranchOutcome.NO_PULL_REQUEST)

    @property
    def error(self) -> List[BranchClassification]:
        return self._group(BranchOutcome.LOOKUP_ERROR)

    def groups(self) -> Dict[str, List[str]]:
        """Branch names per group."""
        return {
            "merged": [c.branch for c in self.merged],
            "closedUnmerged": [c.branch for c in self.closed_unmerged],
            "open": [c.branch for c in self.open],
            "noPullRequest": [c.branch for c in self.no_pull_request],
            "error": [c.branch for c in self.error],
        }

    def summary(self) -> Dict[str, int]:
        counts = {name: len(branches) for name, branches in self.groups().items()}
        counts["total"] = len(self.classifications)
        return counts

    def deletion_candidates(
        self,
        policy: DeletionPolicy,
        current_branch: Optional[str],
        protected_branches: Iterable[str],
    ) -> List[DeletionCandidate]:
        """Branches selected by ``policy`` that are also safe to delete.

        Merged branches come first, then closed-unmerged ones.
        """
        protected = set(protected_branches)
        selected = []
        if policy.include_merged:
            selected.extend((c, "merged") for c in self.merged)
        if policy.include_closed:
            selected.extend((c, "closed") for c in self.closed_unmerged)

        return [
            DeletionCandidate(c.branch, c.pull_request, reason)
            for c, reason in selected
            if c.pull_request is not None
            and BranchMatcher.is_safe_to_delete(c.branch, current_branch, protected)
        ]
