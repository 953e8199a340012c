import sys

from github_branch_cleaner.cli import main

sys.exit(main())
