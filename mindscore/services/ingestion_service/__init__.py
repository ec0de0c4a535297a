"""Ingestion Service: loads historical survey ratings into the ratings store.

Usage:
    python -m mindscore.services.ingestion_service.cli import --csv ratings.csv
"""

from .csv_loader import RatingsCsvLoader, CsvLoadResult, parse_year

__all__ = [
    "RatingsCsvLoader",
    "CsvLoadResult",
    "parse_year",
]
