"""Matching local branches to GitHub pull requests"""

from typing import Callable, Iterable, List, Optional, Tuple, Union, TYPE_CHECKING

from github_branch_cleaner.exceptions import GitHubAPIError, PullRequestLookupError
from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.branch import (
    BranchClassification,
    BranchOutcome,
    DeletionPolicy,
)
from github_branch_cleaner.models.pull_request import (
    PullRequestRecord,
    PullRequestState,
    PullRequestSummary,
)

if TYPE_CHECKING:
    from github_branch_cleaner.config import Config
    from github_branch_cleaner.services.github_service import GitHubService

logger = get_logger(__name__)

Strategy = Callable[[str], Optional[PullRequestSummary]]

SEARCH_QUERY_TEMPLATES = [
    "head:{branch}",
    "in:title {branch}",
    "{branch}",
]


class BranchMatcher:
    """Finds the pull request for a branch and classifies it.

    Lookup strategies share the signature ``branch_name -> summary | None`` and
    are tried in order until one returns a match:

    1. exact head listing
    2. issue search variants, keeping exact head matches only
    3. full listing filtered by head branch name

    A match is upgraded to a full PullRequestRecord before it is returned.
    """

    def __init__(self, github_service: "GitHubService", config: Union["Config", dict]):
        self.github_service = github_service
        self.config = config
        self.protected_branches = list(
            config.get("protected_branches", ["main", "master", "develop", "dev"])
        )
        self.dedupe_search = config.get("dedupe_search", False)
        self.strategies: List[Tuple[str, Strategy]] = self._build_strategies()

    def _search_queries(self) -> List[str]:
        templates = list(SEARCH_QUERY_TEMPLATES)
        if self.dedupe_search:
            # head:<branch> repeats what the exact head listing just asked for
            templates = [t for t in templates if not t.startswith("head:")]
        return templates

    def _build_strategies(self) -> List[Tuple[str, Strategy]]:
        strategies: List[Tuple[str, Strategy]] = [("exact head", self._match_exact_head)]
        for template in self._search_queries():
            strategies.append((f"search '{template}'", self._search_strategy(template)))
        strategies.append(("full listing", self._match_full_listing))
        return strategies

    def _match_exact_head(self, branch_name: str) -> Optional[PullRequestSummary]:
        prs = self.github_service.list_pull_requests_for_head(branch_name)
        return prs[0] if prs else None

    def _search_strategy(self, template: str) -> Strategy:
        def search(branch_name: str) -> Optional[PullRequestSummary]:
            results = self.github_service.search_pull_requests(template.format(branch=branch_name))
            # Search is fuzzy; only an exact head branch match counts
            owner = self.github_service.owner
            return next((pr for pr in results if pr.is_head_of(branch_name, owner)), None)

        return search

    def _match_full_listing(self, branch_name: str) -> Optional[PullRequestSummary]:
        prs = self.github_service.list_all_pull_requests()
        owner = self.github_service.owner
        return next((pr for pr in prs if pr.is_head_of(branch_name, owner)), None)

    def find_pull_request_for_branch(self, branch_name: str) -> Optional[PullRequestRecord]:
        """Find the PR for ``branch_name``.

        Returns None when every strategy ran without a match. Raises
        PullRequestLookupError when every strategy failed, or when the detail
        fetch for a match failed.
        """
        failures = []
        for name, strategy in self.strategies:
            try:
                summary = strategy(branch_name)
            except GitHubAPIError as e:
                logger.warning(f"Strategy {name} failed for {branch_name}: {e}")
                failures.append(e)
                continue

            if summary is None:
                logger.debug(f"Strategy {name} found no PR for {branch_name}")
                continue

            logger.debug(f"Strategy {name} matched {branch_name} to PR #{summary.number}")
            try:
                return self.github_service.get_pull_request_details(summary.number)
            except GitHubAPIError as e:
                raise PullRequestLookupError(branch_name, str(e)) from e

        if failures and len(failures) == len(self.strategies):
            raise PullRequestLookupError(branch_name, str(failures[-1])) from failures[-1]

        return None

    def resolve_branch(self, branch_name: str) -> BranchClassification:
        """Classify ``branch_name`` using the cascading lookup."""
        try:
            pr = self.find_pull_request_for_branch(branch_name)
        except GitHubAPIError as e:
            logger.debug(f"Lookup failed for {branch_name}: {e}")
            return BranchClassification(branch_name, BranchOutcome.LOOKUP_ERROR, error=str(e))
        return self.classify_pull_request(branch_name, pr)

    @staticmethod
    def classify_pull_request(
        branch_name: str, pr: Optional[PullRequestRecord]
    ) -> BranchClassification:
        """Turn a (possibly missing) PR into a BranchClassification."""
        if pr is None:
            return BranchClassification(branch_name, BranchOutcome.NO_PULL_REQUEST)
        if pr.merged:
            outcome = BranchOutcome.MERGED
        elif pr.state == PullRequestState.CLOSED:
            outcome = BranchOutcome.CLOSED_UNMERGED
        else:
            outcome = BranchOutcome.OPEN
        return BranchClassification(branch_name, outcome, pull_request=pr)

    @staticmethod
    def should_delete(pr: Optional[PullRequestRecord], policy: DeletionPolicy) -> bool:
        """Check whether ``pr`` is in a terminal state selected by ``policy``."""
        if pr is None:
            return False

        if policy.include_merged and pr.merged:
            return True

        if policy.include_closed and pr.is_closed_unmerged:
            return True

        return False

    @staticmethod
    def is_safe_to_delete(
        branch_name: str, current_branch: Optional[str], protected_branches: Iterable[str]
    ) -> bool:
        """
        Check that a branch is neither checked out nor protected.

        Args:
            branch_name: Name of the branch
            current_branch: Currently checked-out branch (None on detached HEAD)
            protected_branches: Names that must never be deleted

        Returns:
            True if the branch may be deleted
        """
        if current_branch is not None and branch_name == current_branch:
            return False

        return branch_name not in set(protected_branches)

    @staticmethod
    def describe_pull_request(pr: Optional[PullRequestRecord]) -> str:
        """Short human-readable PR status."""
        if pr is None:
            return "No PR found"

        if pr.merged:
            return f"Merged ({pr.state.value})"

        return pr.state.value.capitalize()
