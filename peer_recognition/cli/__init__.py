#!/usr/bin/env python3
"""
Peer Recognition Operator CLI

Usage:
    python -m peer_recognition.cli <command> [options]

Commands:
    sweep       Run the auto-transition sweep once
    chapters    List chapters or show one
    export      Write a chapter export as JSON
    results     Print ranked results for a chapter

Environment:
    STORAGE_BACKEND memory|file|redis|sql
    DATA_FILE       JSON file path (file backend)
    REDIS_URL       Redis connection string (redis backend)
    DATABASE_URL    SQLAlchemy async URL (sql backend)
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import sys
import argparse
import logging
from typing import Optional

from peer_recognition.cli.chapter_commands import ChapterCommand, ExportCommand, ResultsCommand, SweepCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="peer-recognition",
        description="Peer Recognition operator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s sweep
  %(prog)s chapters list
  %(prog)s chapters show --id 5f0c...
  %(prog)s export --id 5f0c... --output sprint1.json
  %(prog)s results --id 5f0c...
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # sweep
    subparsers.add_parser("sweep", help="Advance chapters whose phase has run out")

    # chapters
    chapters_parser = subparsers.add_parser("chapters", help="Chapter inspection")
    chapters_subparsers = chapters_parser.add_subparsers(dest="chapters_action")
    chapters_subparsers.add_parser("list", help="List chapters, newest first")
    show_parser = chapters_subparsers.add_parser("show", help="Show one chapter")
    show_parser.add_argument("--id", "-i", required=True, help="Chapter ID")

    # export
    export_parser = subparsers.add_parser("export", help="Export a chapter as JSON")
    export_parser.add_argument("--id", "-i", required=True, help="Chapter ID")
    export_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    # results
    results_parser = subparsers.add_parser("results", help="Show ranked results")
    results_parser.add_argument("--id", "-i", required=True, help="Chapter ID")

    return parser


def main(args: Optional[list] = None, store=None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "sweep": SweepCommand,
        "chapters": ChapterCommand,
        "export": ExportCommand,
        "results": ResultsCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](store=store)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
