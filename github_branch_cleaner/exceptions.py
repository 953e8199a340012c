"""Custom exceptions for github-branch-cleaner"""

from typing import Optional


class BranchCleanerError(Exception):
    """Base exception for all github-branch-cleaner errors."""
    pass


class GitOperationError(BranchCleanerError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class NotAGitRepositoryError(GitOperationError):
    """Exception raised when the working directory is not a Git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("open_repository", message=f"{path} is not a Git repository")


class RepositoryCoordinatesError(GitOperationError):
    """Exception raised when owner/name cannot be derived from the remote URL."""

    def __init__(self, remote_url: Optional[str]):
        self.remote_url = remote_url
        super().__init__(
            "get_repository_info",
            message=f"Could not parse GitHub repository from remote URL: {remote_url}",
        )


class GitHubAPIError(BranchCleanerError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None, status: Optional[int] = None):
        self.operation = operation
        self.message = message
        self.status = status

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class MissingTokenError(GitHubAPIError):
    """Exception raised when no GitHub token is configured."""

    def __init__(self):
        super().__init__(
            "authenticate",
            "GITHUB_TOKEN environment variable or 'github_token' config value is required",
        )


class BatchFetchError(GitHubAPIError):
    """Exception raised when the time-windowed pull request fetch fails."""

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__("batch_fetch", message, status)


class PullRequestLookupError(GitHubAPIError):
    """Exception raised when every lookup strategy for a branch failed."""

    def __init__(self, branch: str, message: Optional[str] = None):
        self.branch = branch
        super().__init__(
            "find_pull_request",
            f"Failed to find PR for branch {branch}" + (f": {message}" if message else ""),
        )
