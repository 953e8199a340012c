"""Command-line interface for github-branch-cleaner"""

import os
import sys

from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.markup import escape

from .args import parse_args
from .config import Config
from .core import BranchCleaner
from .exceptions import BranchCleanerError
from .logging_config import setup_logging

console = Console()


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)

    setup_logging(
        verbose=parsed_args.verbose, debug=parsed_args.debug, log_file=parsed_args.log_file
    )
    # GITHUB_TOKEN may live in a .env file next to the repository
    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = Config(
            include_merged=parsed_args.merged,
            include_closed=parsed_args.closed,
            dry_run=parsed_args.dry_run,
            force=parsed_args.force,
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            protected_branches=parsed_args.protected,
            main_branch=parsed_args.main_branch,
            remote_name=parsed_args.remote,
            since_buffer_days=parsed_args.since_buffer_days,
            use_batch=not parsed_args.no_batch,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {escape(str(value))}")

        console.print("Analyzing local branches and their GitHub PRs...\n")
        cleaner = BranchCleaner(os.getcwd(), config)
        return cleaner.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (BranchCleanerError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
