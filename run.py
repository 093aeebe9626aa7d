"""Entry point: ingest an extracted page dump into the SQLite store."""

import argparse
import logging
import sys
from collections.abc import Sequence

from oahspe.config import load_config
from oahspe.ingestion import IngestionService, OahspeParser, PageIngestionRunner, PageLoader
from oahspe.storage import Repositories, get_connection, initialize_database


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        An ArgumentParser taking the page dump path and an optional config file.
    """
    parser = argparse.ArgumentParser(
        description="Rebuild books, chapters, verses, notes and images from a page dump.",
    )
    parser.add_argument("pages", help="Text dump with pages separated by form feeds")
    parser.add_argument(
        "--config", default="config.yaml", help="YAML configuration file (default: config.yaml)"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Initialize the database and ingest the page dump given on the command line.

    Args:
        argv: Command-line arguments without the program name. Defaults to sys.argv.

    Returns:
        0 if every page was ingested, 1 if any page failed.
    """
    args = build_arg_parser().parse_args(argv)

    config = load_config(args.config)
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    # Initialize SQLite database
    initialize_database(config.storage.sqlite_path)

    conn = get_connection(config.storage.sqlite_path)
    try:
        service = IngestionService.from_repositories(Repositories(conn), config.ingestion)
        runner = PageIngestionRunner(
            parser=OahspeParser(),
            service=service,
            conn=conn,
            loader=PageLoader(config.ingestion.page_separator),
        )
        report = runner.ingest_file(args.pages)
    finally:
        conn.close()

    for error in report.page_errors:
        print(f"Page {error.page_number}: {error.message}", file=sys.stderr)
    return 0 if report.is_successful else 1


if __name__ == "__main__":
    sys.exit(main())
