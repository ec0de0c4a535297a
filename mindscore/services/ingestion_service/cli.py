#!/usr/bin/env python3
"""Command-line interface for loading historical ratings.

Usage:
    python -m mindscore.services.ingestion_service.cli --help
    python -m mindscore.services.ingestion_service.cli schema
    python -m mindscore.services.ingestion_service.cli import --csv ratings.csv
    python -m mindscore.services.ingestion_service.cli import --csv extra.csv --append
"""
import argparse
import logging
import sys
from typing import List, Optional

from mindscore.shared.database import RatingRepository, RepositoryError, get_connection_manager
from mindscore.shared.errors import IngestionError
from .csv_loader import RatingsCsvLoader

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        description="MindScore ratings ingestion CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    import_parser = subparsers.add_parser("import", help="Import ratings from CSV")
    import_parser.add_argument(
        "--csv", required=True, dest="csv_path",
        help="Path to the survey CSV export"
    )
    import_parser.add_argument(
        "--append", action="store_true",
        help="Keep existing ratings instead of clearing the table first"
    )

    subparsers.add_parser("schema", help="Create the ratings table and indexes")

    return parser


def import_ratings(
    repository: RatingRepository,
    csv_path: str,
    append: bool = False,
    loader: Optional[RatingsCsvLoader] = None,
) -> int:
    """Load a CSV export into the ratings table.

    Without ``append`` the existing rows are replaced in the same
    transaction as the insert. A file with no usable rows leaves the
    table untouched.

    Args:
        repository: Ratings repository
        csv_path: CSV file path
        append: Keep existing rows when True
        loader: CSV loader (injected for testing)

    Returns:
        Number of rows imported
    """
    loader = loader or RatingsCsvLoader()
    result = loader.load(csv_path)

    repository.ensure_schema()

    if not result.rows:
        logger.warning(
            "RATINGS_IMPORT_EMPTY",
            extra={
                "file": csv_path,
                "headers": result.headers,
                "skipped_count": result.skipped_count,
            }
        )
        return 0

    if append:
        imported = repository.insert_many(result.rows)
    else:
        imported = repository.replace_all(result.rows)

    logger.info(
        "RATINGS_IMPORTED",
        extra={
            "file": csv_path,
            "row_count": imported,
            "skipped_count": result.skipped_count,
            "append": append,
            "table_row_count": repository.count(),
        }
    )
    return imported


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    manager = get_connection_manager()
    repository = RatingRepository(manager)
    try:
        if args.command == "schema":
            repository.ensure_schema()
        elif args.command == "import":
            import_ratings(repository, args.csv_path, append=args.append)
    except (IngestionError, RepositoryError) as e:
        logger.error("INGESTION_FAILED", extra={"command": args.command, "error": str(e)})
        return 1
    finally:
        manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
