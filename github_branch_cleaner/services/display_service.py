"""Display and formatting service for classification results"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from github_branch_cleaner.logging_config import get_logger
from github_branch_cleaner.models.branch import (
    BranchClassification,
    BranchOutcome,
    DeletionCandidate,
    DeletionResult,
)
from github_branch_cleaner.services.branch_matcher import BranchMatcher
from github_branch_cleaner.services.report import ClassificationReport

console = Console()
logger = get_logger(__name__)

OUTCOME_STYLES = {
    BranchOutcome.MERGED: "green",
    BranchOutcome.CLOSED_UNMERGED: "yellow",
    BranchOutcome.OPEN: "cyan",
    BranchOutcome.NO_PULL_REQUEST: "dim",
    BranchOutcome.LOOKUP_ERROR: "red",
}


def format_pr_link(classification: BranchClassification) -> str:
    pr = classification.pull_request
    if pr is None:
        return ""
    if pr.html_url:
        return f"[link={escape(pr.html_url)}]#{pr.number}[/link]"
    return f"#{pr.number}"


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False):
        self.verbose = verbose
        self.debug_mode = debug

    def display_header(self, full_name: str, current_branch: Optional[str], branch_count: int) -> None:
        console.print(f"Repository: [bold]{escape(full_name)}[/bold]")
        console.print(f"Current branch: {escape(current_branch or '(detached HEAD)')}")
        console.print(f"Branches to check: {branch_count}\n")

    def display_classification_table(self, report: ClassificationReport) -> None:
        """Display one row per branch with its PR status."""
        table = Table()
        table.add_column("Branch")
        table.add_column("PR Status")
        table.add_column("PR")
        table.add_column("Title / Error")

        for classification in report.classifications:
            pr = classification.pull_request
            if classification.outcome == BranchOutcome.LOOKUP_ERROR:
                status = "Error"
                detail = classification.error or ""
            else:
                status = BranchMatcher.describe_pull_request(pr)
                detail = pr.title if pr else ""

            table.add_row(
                escape(classification.branch),
                status,
                format_pr_link(classification),
                escape(detail),
                style=OUTCOME_STYLES.get(classification.outcome),
            )

        console.print(table)

        if self.verbose or self.debug_mode:
            summary = report.summary()
            console.print("\nSummary:")
            console.print(f"Total branches: {summary['total']}")
            console.print(f"Merged: {summary['merged']}")
            console.print(f"Closed (unmerged): {summary['closedUnmerged']}")
            console.print(f"Open: {summary['open']}")
            console.print(f"No PR: {summary['noPullRequest']}")
            console.print(f"Errors: {summary['error']}")

    def display_deletion_candidates(self, candidates: List[DeletionCandidate]) -> None:
        if not candidates:
            console.print("\n[green]No branches to delete based on the specified criteria[/green]")
            return

        console.print(f"\nFound {len(candidates)} branch(es) to delete:")
        for candidate in candidates:
            pr = candidate.pull_request
            console.print(f"  - {escape(candidate.branch)} ({candidate.reason} PR #{pr.number})")

    def display_dry_run(self) -> None:
        console.print("\n[yellow]Dry run mode - no branches were deleted[/yellow]")

    def display_cancelled(self) -> None:
        console.print("[yellow]Operation cancelled[/yellow]")

    def display_deletion_results(self, results: List[DeletionResult]) -> None:
        for result in results:
            if result.deleted:
                console.print(f"[green]Deleted: {escape(result.branch)}[/green]")
            else:
                console.print(
                    f"[red]Failed to delete {escape(result.branch)}: "
                    f"{escape(result.error or '')}[/red]"
                )

        deleted = sum(1 for r in results if r.deleted)
        console.print(f"\nSuccessfully deleted {deleted} out of {len(results)} branches")
