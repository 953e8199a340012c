"""Tests for BranchMatcher"""
import itertools

import pytest

from conftest import fake_github_service, make_record, to_summary
from github_branch_cleaner.exceptions import GitHubAPIError, PullRequestLookupError
from github_branch_cleaner.models.branch import BranchOutcome, DeletionPolicy
from github_branch_cleaner.models.pull_request import PullRequestState, PullRequestSummary
from github_branch_cleaner.services.branch_matcher import BranchMatcher

MERGED = make_record(10, "feat/x", state="closed", merged=True)
CLOSED = make_record(11, "feat/y", state="closed", merged=False)
OPEN = make_record(12, "feat/z", state="open")

ALL_POLICIES = [
    DeletionPolicy(include_merged=m, include_closed=c)
    for m, c in itertools.product([False, True], repeat=2)
]


def api_error(message="API Error"):
    return GitHubAPIError("test", message)


class TestShouldDelete:
    """Test policy classification."""

    @pytest.mark.parametrize("pr", [MERGED, CLOSED, OPEN, None])
    def test_empty_policy_never_deletes(self, pr):
        assert BranchMatcher.should_delete(pr, DeletionPolicy()) is False

    @pytest.mark.parametrize("include_closed", [False, True])
    def test_merged_pr_with_include_merged(self, include_closed):
        policy = DeletionPolicy(include_merged=True, include_closed=include_closed)
        assert BranchMatcher.should_delete(MERGED, policy) is True

    def test_merged_pr_is_not_closed_unmerged(self):
        assert BranchMatcher.should_delete(MERGED, DeletionPolicy(include_closed=True)) is False

    @pytest.mark.parametrize("include_merged", [False, True])
    def test_closed_unmerged_pr_with_include_closed(self, include_merged):
        policy = DeletionPolicy(include_merged=include_merged, include_closed=True)
        assert BranchMatcher.should_delete(CLOSED, policy) is True

    def test_closed_unmerged_pr_needs_include_closed(self):
        assert BranchMatcher.should_delete(CLOSED, DeletionPolicy(include_merged=True)) is False

    @pytest.mark.parametrize("policy", ALL_POLICIES)
    def test_open_pr_and_missing_pr_are_kept(self, policy):
        assert BranchMatcher.should_delete(OPEN, policy) is False
        assert BranchMatcher.should_delete(None, policy) is False


class TestIsSafeToDelete:
    """Test branch protection checks."""

    PROTECTED = ["main", "master", "develop", "dev"]

    def test_current_branch_is_not_safe(self):
        assert BranchMatcher.is_safe_to_delete("feat/x", "feat/x", self.PROTECTED) is False

    @pytest.mark.parametrize("branch", ["main", "master", "develop", "dev"])
    def test_protected_branch_is_not_safe(self, branch):
        assert BranchMatcher.is_safe_to_delete(branch, "feat/other", self.PROTECTED) is False

    def test_feature_branch_is_safe(self):
        assert BranchMatcher.is_safe_to_delete("feat/x", "main", self.PROTECTED) is True

    def test_detached_head(self):
        assert BranchMatcher.is_safe_to_delete("feat/x", None, self.PROTECTED) is True
        assert BranchMatcher.is_safe_to_delete("main", None, self.PROTECTED) is False


class TestClassification:
    """Test turning PRs into classifications."""

    @pytest.mark.parametrize("pr, outcome", [
        (MERGED, BranchOutcome.MERGED),
        (CLOSED, BranchOutcome.CLOSED_UNMERGED),
        (OPEN, BranchOutcome.OPEN),
        (None, BranchOutcome.NO_PULL_REQUEST),
    ])
    def test_classify_pull_request(self, pr, outcome):
        classification = BranchMatcher.classify_pull_request("branch", pr)

        assert classification.outcome == outcome
        assert classification.pull_request is pr
        assert classification.error is None

    def test_describe_pull_request(self):
        assert BranchMatcher.describe_pull_request(None) == "No PR found"
        assert BranchMatcher.describe_pull_request(MERGED) == "Merged (closed)"
        assert BranchMatcher.describe_pull_request(CLOSED) == "Closed"
        assert BranchMatcher.describe_pull_request(OPEN) == "Open"

    def test_merged_record_must_be_closed(self):
        with pytest.raises(ValueError):
            make_record(1, "feat/x", state="open", merged=True)


class TestFindPullRequestForBranch:
    """Test the cascading lookup strategies."""

    def test_exact_head_match(self, mock_config):
        service = fake_github_service([MERGED])
        matcher = BranchMatcher(service, mock_config)

        pr = matcher.find_pull_request_for_branch("feat/x")

        assert pr == MERGED
        service.get_pull_request_details.assert_called_once_with(10)
        service.search_pull_requests.assert_not_called()
        service.list_all_pull_requests.assert_not_called()

    def test_exact_head_returns_most_recent(self, mock_config):
        from conftest import utc

        newer = make_record(20, "feat/x", state="open", updated_at=utc(2024, 3, 1))
        older = make_record(15, "feat/x", state="closed", merged=True, updated_at=utc(2024, 1, 1))
        matcher = BranchMatcher(fake_github_service([older, newer]), mock_config)

        assert matcher.find_pull_request_for_branch("feat/x") == newer

    def test_search_strategies_run_in_order(self, mock_config):
        service = fake_github_service([])
        matcher = BranchMatcher(service, mock_config)

        assert matcher.find_pull_request_for_branch("feat/x") is None

        queries = [call.args[0] for call in service.search_pull_requests.call_args_list]
        assert queries == ["head:feat/x", "in:title feat/x", "feat/x"]
        service.list_all_pull_requests.assert_called_once_with()

    def test_search_ignores_inexact_hits(self, mock_config):
        service = fake_github_service([CLOSED])
        service.list_pull_requests_for_head.side_effect = None
        service.list_pull_requests_for_head.return_value = []
        service.search_pull_requests.side_effect = lambda query: (
            [
                PullRequestSummary(99, "feat/y-extra", PullRequestState.OPEN),
                PullRequestSummary(98, None, PullRequestState.OPEN),
                to_summary(CLOSED),
            ]
            if query.startswith("in:title")
            else [PullRequestSummary(97, "feat/yy", PullRequestState.OPEN)]
        )
        matcher = BranchMatcher(service, mock_config)

        pr = matcher.find_pull_request_for_branch("feat/y")

        assert pr == CLOSED
        assert service.search_pull_requests.call_count == 2
        service.get_pull_request_details.assert_called_once_with(11)
        service.list_all_pull_requests.assert_not_called()

    def test_failing_search_is_skipped(self, mock_config, caplog):
        service = fake_github_service([OPEN])
        service.list_pull_requests_for_head.side_effect = None
        service.list_pull_requests_for_head.return_value = []
        service.search_pull_requests.side_effect = api_error("search unavailable")
        matcher = BranchMatcher(service, mock_config)

        pr = matcher.find_pull_request_for_branch("feat/z")

        assert pr == OPEN
        assert service.search_pull_requests.call_count == 3
        assert "search unavailable" in caplog.text

    def test_failing_head_listing_is_not_fatal(self, mock_config):
        service = fake_github_service([MERGED])
        service.list_pull_requests_for_head.side_effect = api_error()
        matcher = BranchMatcher(service, mock_config)

        assert matcher.find_pull_request_for_branch("feat/x") == MERGED

    def test_no_match_anywhere_returns_none(self, mock_config):
        matcher = BranchMatcher(fake_github_service([MERGED, CLOSED]), mock_config)

        assert matcher.find_pull_request_for_branch("feat/unknown") is None

    def test_every_strategy_failing_raises(self, mock_config):
        service = fake_github_service([])
        service.list_pull_requests_for_head.side_effect = api_error()
        service.search_pull_requests.side_effect = api_error()
        service.list_all_pull_requests.side_effect = api_error("listing down")
        matcher = BranchMatcher(service, mock_config)

        with pytest.raises(PullRequestLookupError, match="listing down") as exc_info:
            matcher.find_pull_request_for_branch("feat/x")

        assert exc_info.value.branch == "feat/x"

    def test_some_strategies_failing_without_match_returns_none(self, mock_config):
        service = fake_github_service([])
        service.list_pull_requests_for_head.side_effect = api_error()
        service.search_pull_requests.side_effect = api_error()
        matcher = BranchMatcher(service, mock_config)

        assert matcher.find_pull_request_for_branch("feat/x") is None

    def test_detail_fetch_failure_raises(self, mock_config):
        service = fake_github_service([MERGED])
        service.get_pull_request_details.side_effect = api_error("detail down")
        matcher = BranchMatcher(service, mock_config)

        with pytest.raises(PullRequestLookupError, match="detail down"):
            matcher.find_pull_request_for_branch("feat/x")

    def test_resolve_branch_records_lookup_errors(self, mock_config):
        service = fake_github_service([MERGED])
        service.get_pull_request_details.side_effect = api_error("detail down")
        matcher = BranchMatcher(service, mock_config)

        classification = matcher.resolve_branch("feat/x")

        assert classification.outcome == BranchOutcome.LOOKUP_ERROR
        assert "detail down" in classification.error

    def test_resolve_branch_without_pr(self, mock_config):
        matcher = BranchMatcher(fake_github_service([]), mock_config)

        classification = matcher.resolve_branch("feat/x")

        assert classification.outcome == BranchOutcome.NO_PULL_REQUEST
        assert classification.error is None


class TestSearchDeduplication:
    """The head:<branch> search repeats the exact head listing.

    These tests pin down that dropping it leaves outcomes unchanged before
    anything starts relying on the three-query cascade.
    """

    def test_dedupe_drops_head_query(self, mock_config):
        mock_config["dedupe_search"] = True
        service = fake_github_service([])
        matcher = BranchMatcher(service, mock_config)

        matcher.find_pull_request_for_branch("feat/x")

        queries = [call.args[0] for call in service.search_pull_requests.call_args_list]
        assert queries == ["in:title feat/x", "feat/x"]

    @pytest.mark.parametrize("branch", ["feat/x", "feat/y", "feat/z", "feat/none"])
    def test_dedupe_does_not_change_outcome(self, mock_config, branch):
        records = [MERGED, CLOSED, OPEN]
        default = BranchMatcher(fake_github_service(records), mock_config)
        mock_config["dedupe_search"] = True
        deduped = BranchMatcher(fake_github_service(records), mock_config)

        assert default.resolve_branch(branch) == deduped.resolve_branch(branch)
