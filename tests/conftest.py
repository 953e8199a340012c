"""Pytest fixtures for github-branch-cleaner tests"""
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from github_branch_cleaner.exceptions import GitHubAPIError
from github_branch_cleaner.models.pull_request import (
    PullRequestRecord,
    PullRequestState,
    PullRequestSummary,
)
from github_branch_cleaner.services.github_service import GitHubService


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def make_record(number, head, state="closed", merged=False, updated_at=None, title=""):
    """Build a full PullRequestRecord."""
    return PullRequestRecord(
        number=number,
        head_ref=head,
        state=PullRequestState(state),
        merged=merged,
        title=title or f"PR {number}",
        updated_at=updated_at or utc(2024, 1, 1),
        html_url=f"https://github.com/test/repo/pull/{number}",
    )


def to_summary(record, owner="test"):
    return PullRequestSummary(
        number=record.number,
        head_ref=record.head_ref,
        state=record.state,
        title=record.title,
        updated_at=record.updated_at,
        head_label=f"{owner}:{record.head_ref}",
    )


def make_pull(number, head, state="open", merged=False, updated_at=None, title="", owner="test"):
    """Build a mock PyGithub PullRequest."""
    pull = Mock()
    pull.number = number
    pull.head = Mock()
    pull.head.ref = head
    pull.head.label = f"{owner}:{head}"
    pull.state = state
    pull.merged = merged
    pull.title = title or f"PR {number}"
    pull.updated_at = updated_at or utc(2024, 1, 1)
    pull.html_url = f"https://github.com/test/repo/pull/{number}"
    pull.merged_at = pull.updated_at if merged else None
    pull.closed_at = pull.updated_at if state == "closed" else None
    return pull


def make_issue(number, state="open", updated_at=None, title=""):
    """Build a mock PyGithub Issue carrying only the fields a search hit has."""
    issue = Mock(spec=["number", "state", "title", "updated_at"])
    issue.number = number
    issue.state = state
    issue.title = title or f"PR {number}"
    issue.updated_at = updated_at or utc(2024, 1, 1)
    return issue


def paginated(pages):
    """Mock PaginatedList whose get_page returns ``pages[n]``."""
    paginated_list = Mock()
    paginated_list.get_page.side_effect = lambda page: pages[page] if page < len(pages) else []
    return paginated_list


def fake_github_service(records, fail_batch=False, forks=None):
    """Mock GitHubService answering every call from the same PR records.

    ``forks`` maps PR number to the fork owner the PR was opened from.
    """
    forks = forks or {}
    ordered = sorted(records, key=lambda pr: pr.updated_at, reverse=True)
    by_number = {pr.number: pr for pr in records}

    def summary(pr):
        return to_summary(pr, forks.get(pr.number, "test"))

    def list_all_pull_requests(state="all", since=None):
        if fail_batch and since is not None:
            raise GitHubAPIError("list_pulls", "API rate limit exceeded", 403)
        return [summary(pr) for pr in ordered if since is None or pr.updated_at >= since]

    def list_pull_requests_for_head(branch_name):
        # head=test:<branch> never returns fork PRs
        return [
            summary(pr)
            for pr in ordered
            if pr.head_ref == branch_name and pr.number not in forks
        ]

    def get_pull_request_details(number):
        return by_number[number]

    service = Mock(spec=GitHubService)
    service.gh_repo = Mock()
    service.owner = "test"
    service.name = "repo"
    service.full_name = "test/repo"
    service.list_all_pull_requests.side_effect = list_all_pull_requests
    service.list_pull_requests_for_head.side_effect = list_pull_requests_for_head
    service.search_pull_requests.return_value = []
    service.get_pull_request_details.side_effect = get_pull_request_details
    return service


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'include_merged': True,
        'include_closed': False,
        'verbose': False,
        'debug': False,
        'protected_branches': ['main', 'master', 'develop', 'dev'],
        'main_branch': 'main',
        'dry_run': True,
        'force': False,
        'github_token': 'test_token_for_testing',
        'per_page': 100,
        'since_buffer_days': 30,
        'use_batch': True,
        'dedupe_search': False,
    }


@pytest.fixture
def github_service(mock_config):
    """GitHubService bound to test/repo with mocked PyGithub objects."""
    service = GitHubService(mock_config)
    service.owner = "test"
    service.name = "repo"
    service.github = Mock()
    service.gh_repo = Mock()
    return service


@pytest.fixture
def mock_github_service():
    """A mocked GitHubService with no pull requests."""
    return fake_github_service([])


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    repo.create_remote('origin', 'git@github.com:test/repo.git')

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Create a Git repository with feature branches feat/x, feat/y and feat/z."""
    repo = git_repo
    repo_path = Path(repo.working_dir)

    for branch in ["feat/x", "feat/y", "feat/z"]:
        repo.git.checkout('main')
        repo.git.checkout('-b', branch)
        file_name = branch.replace("/", "_") + ".txt"
        (repo_path / file_name).write_text(f"{branch} content\n")
        repo.index.add([file_name])
        repo.index.commit(f"Work on {branch}")

    repo.git.checkout('main')

    yield repo
