"""Resolving many branches from one time-windowed pull request fetch"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union, TYPE_CHECKING

from github_branch_cleaner.exceptions import BatchFetchError, GitHubAPIError
from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.branch import BranchClassification, BranchOutcome, LocalBranch
from github_branch_cleaner.models.pull_request import PullRequestSummary

if TYPE_CHECKING:
    from github_branch_cleaner.config import Config
    from github_branch_cleaner.services.branch_matcher import BranchMatcher
    from github_branch_cleaner.services.github_service import GitHubService

logger = get_logger(__name__)


class BatchResolver:
    """Classifies branches from a single bulk PR fetch.

    Only PRs updated since the oldest local commit (minus a buffer for clock
    skew, rebases and force-pushes) are fetched. If that fetch fails every
    branch goes through the matcher's per-branch lookup instead.
    """

    def __init__(
        self,
        github_service: "GitHubService",
        matcher: "BranchMatcher",
        config: Union["Config", dict],
    ):
        self.github_service = github_service
        self.matcher = matcher
        self.since_buffer = timedelta(days=config.get("since_buffer_days", 30))
        self.use_batch = config.get("use_batch", True)

    @staticmethod
    def oldest_commit_date(branches: Iterable[LocalBranch]) -> Optional[datetime]:
        """Earliest commit timestamp across ``branches``.

        None when any branch has no known date, since the window would then
        have no safe lower bound.
        """
        dates = [branch.earliest_commit_date for branch in branches]
        if not dates or any(date is None for date in dates):
            return None
        return min(dates)

    def search_since(self, branches: Iterable[LocalBranch]) -> Optional[datetime]:
        oldest = self.oldest_commit_date(branches)
        if oldest is None:
            return None
        return oldest - self.since_buffer

    @staticmethod
    def build_head_index(
        prs: Iterable[PullRequestSummary], owner: Optional[str] = None
    ) -> Dict[str, PullRequestSummary]:
        """Map head branch name to its most recently updated PR.

        ``prs`` must be ordered newest-updated first; the first PR seen for a
        head branch is kept. With ``owner``, PRs opened from forks are left out
        so a fork's branch never shadows the same branch name in ``owner``'s
        repository.
        """
        index: Dict[str, PullRequestSummary] = {}
        for pr in prs:
            if not pr.head_ref or pr.head_ref in index:
                continue
            if pr.is_head_of(pr.head_ref, owner):
                index[pr.head_ref] = pr
        return index

    def fetch_window(self, since: Optional[datetime]) -> List[PullRequestSummary]:
        try:
            return self.github_service.list_all_pull_requests(state="all", since=since)
        except GitHubAPIError as e:
            raise BatchFetchError(str(e), e.status) from e

    def resolve_from_index(
        self, branch_name: str, index: Dict[str, PullRequestSummary]
    ) -> BranchClassification:
        summary = index.get(branch_name)
        if summary is None:
            return BranchClassification(branch_name, BranchOutcome.NO_PULL_REQUEST)

        try:
            pr = self.github_service.get_pull_request_details(summary.number)
        except GitHubAPIError as e:
            logger.debug(f"[Batch] Detail fetch failed for {branch_name}: {e}")
            return BranchClassification(branch_name, BranchOutcome.LOOKUP_ERROR, error=str(e))

        return self.matcher.classify_pull_request(branch_name, pr)

    def resolve_individually(self, branches: Sequence[LocalBranch]) -> List[BranchClassification]:
        return [self.matcher.resolve_branch(branch.name) for branch in branches]

    def resolve(self, branches: Sequence[LocalBranch]) -> List[BranchClassification]:
        """Classify every branch, in input order."""
        if not branches:
            return []

        if not self.use_batch:
            logger.debug("[Batch] Batch resolution disabled, resolving branches individually")
            return self.resolve_individually(branches)

        since = self.search_since(branches)
        if since is None:
            logger.debug("[Batch] No commit date bound, fetching every PR")
        else:
            logger.debug(f"[Batch] Fetching PRs updated since {since.isoformat()}")

        try:
            prs = self.fetch_window(since)
        except BatchFetchError as e:
            logger.warning(f"[Batch] Batch fetch failed, falling back to per-branch lookup: {e}")
            return self.resolve_individually(branches)

        index = self.build_head_index(prs, self.github_service.owner)
        logger.info(
            f"[Batch] Indexed {len(index)} head branches from {len(prs)} PRs "
            f"for {len(branches)} local branches"
        )
        return [self.resolve_from_index(branch.name, index) for branch in branches]
