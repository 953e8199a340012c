"""Core functionality for github-branch-cleaner"""

from typing import List, Optional, Union

from rich.console import Console
from rich.prompt import Confirm

from github_branch_cleaner.config import Config
from github_branch_cleaner.exceptions import GitOperationError, NotAGitRepositoryError
from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.branch import DeletionCandidate, DeletionResult
from github_branch_cleaner.services.batch_resolver import BatchResolver
from github_branch_cleaner.services.branch_matcher import BranchMatcher
from github_branch_cleaner.services.display_service import DisplayService
from github_branch_cleaner.services.git_service import GitService
from github_branch_cleaner.services.github_service import GitHubService
from github_branch_cleaner.services.report import ClassificationReport

console = Console()
logger = get_logger(__name__)


class BranchCleaner:
    """Classifies local branches by their GitHub PR and deletes the finished ones."""

    def __init__(
        self,
        repo_path: str,
        config: Union[Config, dict],
        git_service: Optional[GitService] = None,
        github_service: Optional[GitHubService] = None,
    ):
        """Initialize BranchCleaner.

        Args:
            repo_path: Path to git repository
            config: Configuration dict or Config object
            git_service: Local git service (created from repo_path if omitted)
            github_service: GitHub service (created from config if omitted)
        """
        self.repo_path = repo_path
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.verbose = self.config.verbose
        self.debug_mode = self.config.debug

        self.git_service = git_service or GitService(repo_path, self.config)
        if not self.git_service.is_git_repository():
            raise NotAGitRepositoryError(str(repo_path))

        self.github_service = github_service or GitHubService(self.config)
        self.matcher = BranchMatcher(self.github_service, self.config)
        self.resolver = BatchResolver(self.github_service, self.matcher, self.config)
        self.display_service = DisplayService(verbose=self.verbose, debug=self.debug_mode)

        self.current_branch: Optional[str] = None

    def connect(self) -> None:
        """Bind the GitHub service to the repository behind the git remote."""
        if self.github_service.gh_repo is not None:
            return
        owner, name = self.git_service.get_repository_coordinates()
        logger.debug(f"Setting up GitHub API for {owner}/{name}")
        self.github_service.setup_github_api(owner, name)

    def get_candidate_branches(self) -> List[str]:
        """Local branches excluding the current one and protected names."""
        return [
            branch
            for branch in self.git_service.get_local_branches()
            if BranchMatcher.is_safe_to_delete(
                branch, self.current_branch, self.config.protected_branches
            )
        ]

    def analyze(self, show_header: bool = False) -> ClassificationReport:
        """Classify every candidate branch against its PR."""
        self.connect()
        self.current_branch = self.git_service.get_current_branch()
        branch_names = self.get_candidate_branches()

        if show_header:
            self.display_service.display_header(
                self.github_service.full_name, self.current_branch, len(branch_names)
            )

        branches = self.git_service.get_local_branch_records(branch_names)
        return ClassificationReport.from_classifications(self.resolver.resolve(branches))

    def select_for_deletion(self, report: ClassificationReport) -> List[DeletionCandidate]:
        return report.deletion_candidates(
            self.config.policy, self.current_branch, self.config.protected_branches
        )

    def delete_branches(self, candidates: List[DeletionCandidate]) -> List[DeletionResult]:
        """Delete each candidate; a failure does not stop the remaining deletions."""
        results = []
        for candidate in candidates:
            try:
                self.git_service.delete_branch(candidate.branch)
                results.append(DeletionResult(candidate.branch, True))
            except GitOperationError as e:
                logger.debug(f"Failed to delete {candidate.branch}: {e}")
                results.append(DeletionResult(candidate.branch, False, str(e)))
        return results

    def run(self) -> int:
        """Analyze, report and delete according to configuration. Returns an exit code."""
        if not self.config.policy.selects_anything:
            raise ValueError("Please specify at least one option: --merged or --closed")

        try:
            report = self.analyze(show_header=True)
            if not report.classifications:
                console.print(
                    "[green]No branches to check (excluding current branch and protected branches)[/green]"
                )
                return 0

            self.display_service.display_classification_table(report)
            candidates = self.select_for_deletion(report)
            self.display_service.display_deletion_candidates(candidates)
            if not candidates:
                return 0

            if self.config.dry_run:
                self.display_service.display_dry_run()
                return 0

            if not self.config.force and not Confirm.ask(
                "\nDo you want to delete these branches?", default=False
            ):
                self.display_service.display_cancelled()
                return 0

            results = self.delete_branches(candidates)
            self.display_service.display_deletion_results(results)
            return 0 if all(r.deleted for r in results) else 1
        finally:
            self.github_service.close()
