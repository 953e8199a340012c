"""Command-line argument parsing for github-branch-cleaner."""

import argparse

from github_branch_cleaner.__version__ import __version__
from github_branch_cleaner.config import DEFAULT_PROTECTED_BRANCHES


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="github-branch-cleaner",
        description="Clean up local Git branches based on GitHub PR status",
        epilog="Setup: Requires GITHUB_TOKEN in the environment or in a .env file. "
        "Get a token at https://github.com/settings/tokens (scopes: repo or public_repo)",
    )
    parser.add_argument("--merged", action="store_true", help="Delete branches with merged PRs")
    parser.add_argument(
        "--closed", action="store_true", help="Delete branches with closed (unmerged) PRs"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    parser.add_argument("--force", action="store_true", help="Skip confirmation prompts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"github-branch-cleaner {__version__}")
    parser.add_argument(
        "--protected",
        nargs="*",
        default=list(DEFAULT_PROTECTED_BRANCHES),
        help="Protected branches",
    )
    parser.add_argument("--main-branch", default="main", help="Main branch name")
    parser.add_argument("--remote", default="origin", help="Name of the GitHub remote")
    parser.add_argument(
        "--since-buffer-days",
        type=int,
        default=30,
        metavar="N",
        help="Days subtracted from the oldest local commit when fetching PRs (default: 30)",
    )
    parser.add_argument(
        "--no-batch",
        action="store_true",
        help="Look up each branch individually instead of one bulk PR fetch",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write a full debug log to PATH (debug mode defaults to ~/.github-branch-cleaner/)",
    )

    args = parser.parse_args(argv)
    if not args.merged and not args.closed:
        parser.error("Please specify at least one option: --merged or --closed")
    return args
