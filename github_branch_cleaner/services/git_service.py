"""Local Git operations service"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union, TYPE_CHECKING

import git

from github_branch_cleaner.exceptions import (
    GitOperationError,
    NotAGitRepositoryError,
    RepositoryCoordinatesError,
)
from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.branch import LocalBranch

if TYPE_CHECKING:
    from github_branch_cleaner.config import Config

logger = get_logger(__name__)

# git@github.com:owner/repo.git, ssh://git@github.com/owner/repo.git,
# https://github.com/owner/repo(.git)
_GITHUB_REMOTE = re.compile(
    r"^(?:git@github\.com:|ssh://git@github\.com/|https?://(?:[^@/]+@)?github\.com/)"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


def parse_github_remote(remote_url: str) -> Tuple[str, str]:
    """Extract ``(owner, name)`` from a GitHub SSH or HTTPS remote URL."""
    match = _GITHUB_REMOTE.match(remote_url.strip())
    if not match:
        raise RepositoryCoordinatesError(remote_url)
    return match.group("owner"), match.group("name")


class GitService:
    """Service for the local Git operations the cleaner needs."""

    def __init__(self, repo_path: str, config: Union["Config", dict]):
        """Initialize the service.

        Args:
            repo_path: Path to the git repository
            config: Configuration dictionary or Config object
        """
        self.repo_path = repo_path
        self.config = config
        self.main_branch = config.get("main_branch", "main")
        self.remote_name = config.get("remote_name", "origin")
        self._repo: Optional[git.Repo] = None

    def _get_repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
                raise NotAGitRepositoryError(str(self.repo_path)) from e
        return self._repo

    def is_git_repository(self) -> bool:
        """Check if repo_path is inside a Git repository."""
        try:
            self._get_repo()
            return True
        except NotAGitRepositoryError:
            return False

    def get_current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None on a detached HEAD."""
        try:
            return self._get_repo().active_branch.name
        except TypeError:
            logger.debug("Detached HEAD, no current branch")
            return None

    def get_local_branches(self) -> List[str]:
        """Names of all local branches."""
        try:
            return [head.name for head in self._get_repo().heads]
        except NotAGitRepositoryError:
            raise
        except Exception as e:
            raise GitOperationError("list_branches", message=str(e)) from e

    def branch_exists(self, branch_name: str) -> bool:
        return branch_name in [head.name for head in self._get_repo().heads]

    def get_branch_commit(self, branch_name: str) -> str:
        """SHA of the branch tip."""
        try:
            return self._get_repo().heads[branch_name].commit.hexsha
        except (IndexError, KeyError, ValueError) as e:
            raise GitOperationError("rev_parse", branch_name, "Branch not found") from e

    def get_earliest_commit_date(self, branch_name: str) -> Optional[datetime]:
        """Timestamp of the oldest commit on the branch that is not on the main branch.

        Falls back to the tip commit when the branch has nothing of its own or
        the main branch does not exist locally. None if the date can't be read.
        """
        try:
            repo = self._get_repo()
            commits = []
            if branch_name != self.main_branch and self.branch_exists(self.main_branch):
                commits = list(repo.iter_commits(f"{self.main_branch}..{branch_name}"))
            if commits:
                timestamp = min(commit.committed_date for commit in commits)
            else:
                timestamp = repo.heads[branch_name].commit.committed_date
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except Exception as e:
            logger.debug(f"Error getting earliest commit date for {branch_name}: {e}")
            return None

    def get_local_branch_records(self, branch_names: List[str]) -> List[LocalBranch]:
        return [LocalBranch(name, self.get_earliest_commit_date(name)) for name in branch_names]

    def get_remote_url(self) -> str:
        try:
            return self._get_repo().remote(self.remote_name).url
        except ValueError as e:
            raise GitOperationError(
                "get_remote", message=f"No remote named '{self.remote_name}'"
            ) from e

    def get_repository_coordinates(self) -> Tuple[str, str]:
        """``(owner, name)`` of the GitHub repository behind the remote."""
        return parse_github_remote(self.get_remote_url())

    def delete_branch(self, branch_name: str) -> None:
        """Force-delete a local branch (the equivalent of ``git branch -D``)."""
        try:
            self._get_repo().delete_head(branch_name, force=True)
            logger.info(f"Deleted local branch {branch_name}")
        except git.exc.GitCommandError as e:
            message = (e.stderr or str(e)).strip()
            raise GitOperationError("delete_branch", branch_name, message) from e
