"""
github-branch-cleaner - Clean up local Git branches based on GitHub PR status
"""

from .__version__ import __version__
from .core import BranchCleaner
from .cli import main

__all__ = ["BranchCleaner", "main", "__version__"]
