"""CSV loader for historical survey ratings.

Reads a survey export, matches headers case-insensitively after
trimming, derives the survey year from the timestamp and takes the
rating from the Score column. Exports without a Score column are rated
with the questionnaire scorer from their answer columns.
"""
import csv
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from mindscore.shared.errors import IngestionError
from mindscore.shared.models import QuestionnaireRecord, RatingRow
from mindscore.services.scoring_service import QuestionnaireScorer

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS = (
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
)

OPTIONAL_COLUMNS = {
    "age": "Age",
    "gender": "Gender",
    "occupation": "Occupation",
    "family_history": "family_history",
}


@dataclass
class CsvLoadResult:
    """Rows accepted from a CSV export plus bookkeeping."""
    rows: List[RatingRow] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    skipped_count: int = 0
    scored_from_answers: bool = False


def parse_year(value: Optional[str]) -> Optional[str]:
    """Extract the four-digit year from a survey timestamp.

    Args:
        value: ISO 8601 or US-style (m/d/Y [H:M[:S]]) timestamp

    Returns:
        Year as a string, or None if the timestamp is not parseable
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        return str(datetime.fromisoformat(text).year)
    except ValueError:
        pass
    for fmt in TIMESTAMP_FORMATS:
        try:
            return str(datetime.strptime(text, fmt).year)
        except ValueError:
            continue
    return None


def parse_score(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        score = float(value.strip())
    except ValueError:
        return None
    return score if math.isfinite(score) else None


class RatingsCsvLoader:
    """Loads RatingRow records from a survey CSV export."""

    def __init__(self, scorer: Optional[QuestionnaireScorer] = None):
        """Initialize loader.

        Args:
            scorer: Scorer used when the export has no Score column
        """
        self.scorer = scorer or QuestionnaireScorer()

    def load(self, path: Union[str, Path]) -> CsvLoadResult:
        """Read and validate every row of a CSV file.

        Args:
            path: CSV file path

        Returns:
            CsvLoadResult with the accepted rows

        Raises:
            IngestionError: If the file cannot be read or has no header row
        """
        csv_path = Path(path)
        try:
            with open(csv_path, "r", newline="", encoding="utf-8-sig") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    raise IngestionError(f"{csv_path} has no header row")
                result = self.parse(reader.fieldnames, reader)
        except OSError as e:
            logger.error("RATINGS_CSV_READ_FAILED", extra={"file": str(csv_path), "error": str(e)})
            raise IngestionError(f"Cannot read {csv_path}: {e}") from e

        logger.info(
            "RATINGS_CSV_LOADED",
            extra={
                "file": str(csv_path),
                "row_count": len(result.rows),
                "skipped_count": result.skipped_count,
                "scored_from_answers": result.scored_from_answers,
            }
        )
        return result

    def parse(
        self,
        fieldnames: Sequence[str],
        records: Iterable[Dict[str, Optional[str]]],
    ) -> CsvLoadResult:
        """Validate raw CSV records.

        Rows without a parseable year, a numeric score or a country
        are skipped.

        Args:
            fieldnames: Header row as read from the file
            records: Rows keyed by the untrimmed header names

        Returns:
            CsvLoadResult
        """
        headers = [name.strip() for name in fieldnames]
        lookup = {name.lower(): name for name in headers}
        logger.info("RATINGS_CSV_HEADERS_DETECTED", extra={"headers": headers})

        timestamp_key = lookup.get("timestamp")
        score_key = lookup.get("score")
        country_key = lookup.get("country")
        optional_keys = {
            attr: lookup.get(column.lower())
            for attr, column in OPTIONAL_COLUMNS.items()
        }

        result = CsvLoadResult(headers=headers, scored_from_answers=score_key is None)

        for raw in records:
            row = {
                (key or "").strip(): (value.strip() if isinstance(value, str) else value)
                for key, value in raw.items()
            }

            year = parse_year(row.get(timestamp_key)) if timestamp_key else None
            if score_key:
                rating = parse_score(row.get(score_key))
            else:
                rating = self.scorer.score(QuestionnaireRecord.from_dict(row))
            country = row.get(country_key) if country_key else None

            if not year or rating is None or not country:
                result.skipped_count += 1
                continue

            result.rows.append(RatingRow(
                country=country,
                year=year,
                rating=rating,
                **{
                    attr: (row.get(key) or None) if key else None
                    for attr, key in optional_keys.items()
                },
            ))

        return result
