"""Configuration handling for github-branch-cleaner"""

from dataclasses import dataclass, field
from typing import Optional, List

from github_branch_cleaner.models.branch import DeletionPolicy

DEFAULT_PROTECTED_BRANCHES = ["main", "master", "develop", "dev"]


@dataclass
class Config:
    """Configuration for github-branch-cleaner with validation."""

    # Deletion policy
    include_merged: bool = False
    include_closed: bool = False

    # Branch filtering
    protected_branches: List[str] = field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES)
    )
    main_branch: str = "main"
    remote_name: str = "origin"

    # Execution modes
    dry_run: bool = False
    force: bool = False
    verbose: bool = False
    debug: bool = False

    # GitHub integration
    github_token: Optional[str] = None
    per_page: int = 100
    since_buffer_days: int = 30
    use_batch: bool = True
    dedupe_search: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_main_branch()
        self._validate_protected_branches()
        self._validate_remote_name()
        self._validate_per_page()
        self._validate_since_buffer_days()

    def _validate_main_branch(self):
        """Validate main_branch is not empty."""
        if not self.main_branch or not self.main_branch.strip():
            raise ValueError("main_branch cannot be empty")
        self.main_branch = self.main_branch.strip()

    def _validate_protected_branches(self):
        """Validate protected_branches list."""
        if not isinstance(self.protected_branches, list):
            raise ValueError("protected_branches must be a list")

        # Ensure main_branch is in protected_branches
        if self.main_branch not in self.protected_branches:
            self.protected_branches.append(self.main_branch)

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")

    def _validate_per_page(self):
        """Validate per_page is within the GitHub API limits."""
        if not 1 <= self.per_page <= 100:
            raise ValueError(f"per_page must be between 1 and 100, got {self.per_page}")

    def _validate_since_buffer_days(self):
        """Validate since_buffer_days is not negative."""
        if self.since_buffer_days < 0:
            raise ValueError(
                f"since_buffer_days must not be negative, got {self.since_buffer_days}"
            )

    @property
    def policy(self) -> DeletionPolicy:
        """Deletion policy built from the include flags."""
        return DeletionPolicy(
            include_merged=self.include_merged, include_closed=self.include_closed
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "include_merged": self.include_merged,
            "include_closed": self.include_closed,
            "protected_branches": self.protected_branches,
            "main_branch": self.main_branch,
            "remote_name": self.remote_name,
            "dry_run": self.dry_run,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
            "github_token": self.github_token,
            "per_page": self.per_page,
            "since_buffer_days": self.since_buffer_days,
            "use_batch": self.use_batch,
            "dedupe_search": self.dedupe_search,
        }

    def get(self, key: str, default=None):
        """Get config value by key, mirroring dict access."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "include_merged",
            "include_closed",
            "protected_branches",
            "main_branch",
            "remote_name",
            "dry_run",
            "force",
            "verbose",
            "debug",
            "github_token",
            "per_page",
            "since_buffer_days",
            "use_batch",
            "dedupe_search",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
