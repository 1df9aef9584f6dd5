"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from ragdesk.core.errors import ConfigurationError

from .ragdesk_cli import main


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive help desk backed by a conversational RAG pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable human-readable debug logging",
    )
    parser.add_argument(
        "--show-question",
        action="store_true",
        help="Show the standalone question and retrieved sources for each turn",
    )

    return parser.parse_args(argv)


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(main(debug=args.debug, show_question=args.show_question))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
