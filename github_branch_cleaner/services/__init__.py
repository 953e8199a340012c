"""Services for github-branch-cleaner."""

from .github_service import GitHubService
from .git_service import GitService, parse_github_remote
from .branch_matcher import BranchMatcher
from .batch_resolver import BatchResolver
from .report import ClassificationReport
from .display_service import DisplayService

__all__ = [
    "GitHubService",
    "GitService",
    "parse_github_remote",
    "BranchMatcher",
    "BatchResolver",
    "ClassificationReport",
    "DisplayService",
]
