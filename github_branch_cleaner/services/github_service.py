"""GitHub API integration service"""
import os
from datetime import datetime, timezone
from typing import Optional, List, TYPE_CHECKING, Union

from github import Github, Auth, GithubException, UnknownObjectException

from github_branch_cleaner.exceptions import GitHubAPIError, MissingTokenError
from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.pull_request import (
    PullRequestRecord,
    PullRequestState,
    PullRequestSummary,
)

if TYPE_CHECKING:
    from github.Repository import Repository
    from github_branch_cleaner.config import Config

logger = get_logger(__name__)

VALIDATION_FAILED = 422


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime (older PyGithub releases return naive UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _error_message(error: Exception) -> str:
    if isinstance(error, GithubException):
        data = error.data if isinstance(error.data, dict) else {}
        return data.get("message") or str(error)
    return str(error)


def _error_status(error: Exception) -> Optional[int]:
    return error.status if isinstance(error, GithubException) else None


class GitHubService:
    """Thin client for the GitHub pull request endpoints.

    No retries happen here: every failure is raised as a GitHubAPIError naming
    the operation and its identifiers, and callers decide how to fall back.
    """

    def __init__(self, config: Union["Config", dict]):
        """Initialize the service.

        The token comes from the config or the GITHUB_TOKEN environment variable.
        """
        self.config = config
        self.debug_mode = config.get("debug", False)
        self.per_page = config.get("per_page", 100)
        self.github_token = config.get("github_token") or os.environ.get("GITHUB_TOKEN")
        self.owner: Optional[str] = None
        self.name: Optional[str] = None
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def setup_github_api(self, owner: str, name: str) -> None:
        """Authenticate and bind the service to ``owner/name``."""
        if not self.github_token:
            raise MissingTokenError()

        self.owner = owner
        self.name = name
        try:
            self.github = Github(auth=Auth.Token(self.github_token), per_page=self.per_page)
            self.gh_repo = self.github.get_repo(self.full_name)
        except Exception as e:
            logger.error(f"[GitHub] Failed to setup GitHub API: {e}")
            raise GitHubAPIError(
                "get_repo", f"{self.full_name}: {_error_message(e)}", _error_status(e)
            ) from e

        logger.debug(f"[GitHub] GitHub integration enabled for: {self.full_name}")

    def _to_summary(self, pull) -> PullRequestSummary:
        return PullRequestSummary(
            number=pull.number,
            head_ref=pull.head.ref,
            state=PullRequestState(pull.state),
            title=pull.title or "",
            updated_at=_as_utc(pull.updated_at),
            head_label=pull.head.label,
        )

    def _to_record(self, pull) -> PullRequestRecord:
        return PullRequestRecord(
            number=pull.number,
            head_ref=pull.head.ref,
            state=PullRequestState(pull.state),
            merged=bool(pull.merged),
            title=pull.title or "",
            updated_at=_as_utc(pull.updated_at),
            html_url=pull.html_url,
            merged_at=_as_utc(pull.merged_at),
            closed_at=_as_utc(pull.closed_at),
        )

    def list_pull_requests_for_head(self, branch_name: str) -> List[PullRequestSummary]:
        """List PRs whose head is ``<owner>:<branch_name>``, newest-updated first.

        When GitHub rejects the head filter (422), the full listing is fetched
        and filtered client-side to the same owner and branch instead.
        """
        assert self.gh_repo is not None
        try:
            pulls = self.gh_repo.get_pulls(
                state="all",
                sort="updated",
                direction="desc",
                head=f"{self.owner}:{branch_name}",
            )
            return [self._to_summary(pull) for pull in pulls]
        except GithubException as e:
            if e.status != VALIDATION_FAILED:
                raise GitHubAPIError(
                    "list_pulls",
                    f"Failed to fetch PRs for branch {branch_name}: {_error_message(e)}",
                    e.status,
                ) from e
            logger.debug(
                f"[GitHub] Head filter rejected for {branch_name}, filtering full listing"
            )
        except Exception as e:
            raise GitHubAPIError(
                "list_pulls", f"Failed to fetch PRs for branch {branch_name}: {e}"
            ) from e

        return [
            pr for pr in self.list_all_pull_requests() if pr.is_head_of(branch_name, self.owner)
        ]

    def get_pull_request_details(self, number: int) -> PullRequestRecord:
        """Fetch the full record for PR ``number``."""
        assert self.gh_repo is not None
        try:
            return self._to_record(self.gh_repo.get_pull(number))
        except Exception as e:
            raise GitHubAPIError(
                "get_pull",
                f"Failed to get PR details for #{number}: {_error_message(e)}",
                _error_status(e),
            ) from e

    def is_pull_request_merged(self, number: int) -> bool:
        """Check the merge endpoint for PR ``number``; a 404 means not merged."""
        assert self.gh_repo is not None
        try:
            return bool(self.gh_repo.get_pull(number).is_merged())
        except UnknownObjectException:
            return False
        except Exception as e:
            raise GitHubAPIError(
                "check_merged",
                f"Failed to check if PR #{number} is merged: {_error_message(e)}",
                _error_status(e),
            ) from e

    def search_pull_requests(self, query: str) -> List[PullRequestSummary]:
        """Run an issue search scoped to this repository's pull requests.

        Only the first page of hits is returned. Search hits are issue payloads
        with no head branch, so ``head_ref`` is always None. Only fields the
        search response already carries are read; touching anything else
        (``raw_data`` included) makes PyGithub fetch each issue again.
        """
        assert self.github is not None
        search_query = f"repo:{self.full_name} is:pr {query}"
        try:
            issues = self.github.search_issues(search_query, sort="updated", order="desc")
            results = []
            for issue in issues.get_page(0):
                results.append(
                    PullRequestSummary(
                        number=issue.number,
                        head_ref=None,
                        state=PullRequestState(issue.state),
                        title=issue.title or "",
                        updated_at=_as_utc(issue.updated_at),
                    )
                )
            return results
        except Exception as e:
            raise GitHubAPIError(
                "search_issues",
                f"Failed to search PRs with '{search_query}': {_error_message(e)}",
                _error_status(e),
            ) from e

    def list_all_pull_requests(
        self, state: str = "all", since: Optional[datetime] = None
    ) -> List[PullRequestSummary]:
        """Page through every PR, most recently updated first.

        Pagination stops at the first short page. With ``since``, each page is
        filtered to PRs updated at or after ``since`` and pagination stops once
        a page reaches PRs older than it (GitHub ignores ``since`` here).
        """
        assert self.gh_repo is not None
        since = _as_utc(since)
        all_prs: List[PullRequestSummary] = []
        page = 0
        try:
            pulls = self.gh_repo.get_pulls(state=state, sort="updated", direction="desc")
            while True:
                data = [self._to_summary(pull) for pull in pulls.get_page(page)]

                if since is not None:
                    in_window = [
                        pr for pr in data if pr.updated_at is None or pr.updated_at >= since
                    ]
                    all_prs.extend(in_window)
                    oldest = data[-1].updated_at if data else None
                    if oldest is not None and oldest < since:
                        logger.debug(f"[GitHub] Reached PRs older than {since.isoformat()}")
                        break
                else:
                    all_prs.extend(data)

                # If we got fewer results than requested, we've reached the end
                if len(data) < self.per_page:
                    break
                page += 1
        except Exception as e:
            raise GitHubAPIError(
                "list_pulls",
                f"Failed to get all PRs (page {page + 1}): {_error_message(e)}",
                _error_status(e),
            ) from e

        logger.debug(f"[GitHub] Fetched {len(all_prs)} PRs across {page + 1} page(s)")
        return all_prs

    def get_repository_info(self) -> dict:
        """Return basic information about the bound repository."""
        assert self.gh_repo is not None
        try:
            return {
                "full_name": self.gh_repo.full_name,
                "default_branch": self.gh_repo.default_branch,
                "html_url": self.gh_repo.html_url,
            }
        except Exception as e:
            raise GitHubAPIError(
                "get_repo", f"Failed to get repository info: {_error_message(e)}"
            ) from e

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        if self.github:
            try:
                self.github.close()
                logger.debug("[GitHub] Closed GitHub API connection")
            except Exception as e:
                logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
