"""Repository pattern for the ratings store.

BaseRepository carries the connection handling, error translation and
logging shared by table repositories. RatingRepository is the bulk data
source for the distribution index and the average cache.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

import psycopg2

from mindscore.shared.models import HistoricalObservation, RatingRow, coerce_observation
from .connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar('T')

Statement = Tuple[str, Optional[List[tuple]]]


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository with common operations.

    Subclasses implement entity-specific logic while inheriting:
    - Connection management
    - Error handling
    - Logging patterns
    """

    columns: Sequence[str] = ()

    def __init__(
        self,
        connection_manager: ConnectionManager,
        table_name: str,
    ):
        """Initialize repository.

        Args:
            connection_manager: Database connection manager
            table_name: Name of the database table
        """
        self.connection_manager = connection_manager
        self.table_name = table_name

        logger.info(
            "REPOSITORY_INITIALIZED",
            extra={"table_name": table_name}
        )

    @abstractmethod
    def _row_to_entity(self, row: tuple) -> T:
        """Convert database row to entity.

        Args:
            row: Database row tuple in ``columns`` order

        Returns:
            Entity instance
        """
        pass

    @abstractmethod
    def _entity_to_params(self, entity: T) -> Dict[str, Any]:
        """Convert entity to database parameters.

        Args:
            entity: Entity instance

        Returns:
            Dictionary of column names to values
        """
        pass

    def _fetch(self, query: str, params: tuple = ()) -> List[tuple]:
        try:
            with self.connection_manager.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    return cur.fetchall()
        except psycopg2.Error as e:
            logger.error(
                "REPOSITORY_QUERY_FAILED",
                extra={"table_name": self.table_name, "error": str(e)}
            )
            raise RepositoryError(f"Query on {self.table_name} failed: {e}") from e

    def _execute(self, statements: Sequence[Statement]) -> List[int]:
        """Run statements on one connection and commit them together.

        Args:
            statements: ``(query, params_seq)`` pairs; ``params_seq`` of
                None runs the query once without parameters

        Returns:
            Row count of each statement
        """
        try:
            with self.connection_manager.get_connection() as conn:
                rowcounts = []
                with conn.cursor() as cur:
                    for query, params_seq in statements:
                        if params_seq is None:
                            cur.execute(query)
                        else:
                            cur.executemany(query, params_seq)
                        rowcounts.append(cur.rowcount)
                conn.commit()
                return rowcounts
        except psycopg2.Error as e:
            logger.error(
                "REPOSITORY_WRITE_FAILED",
                extra={"table_name": self.table_name, "error": str(e)}
            )
            raise RepositoryError(f"Write on {self.table_name} failed: {e}") from e

    def _insert_statement(self, entities: Sequence[T]) -> Statement:
        params = [self._entity_to_params(e) for e in entities]
        columns = list(params[0].keys())
        placeholders = ", ".join(["%s"] * len(columns))
        query = (
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES ({placeholders})"
        )
        return query, [tuple(p[c] for c in columns) for p in params]

    def find_page(
        self,
        limit: int = 100,
        offset: int = 0,
    ) -> List[T]:
        """Find entities with pagination, in insertion order.

        Args:
            limit: Maximum entities to return
            offset: Number of entities to skip

        Returns:
            List of entities
        """
        rows = self._fetch(
            f"SELECT {', '.join(self.columns)} FROM {self.table_name} "
            f"ORDER BY id LIMIT %s OFFSET %s",
            (limit, offset)
        )
        return [self._row_to_entity(row) for row in rows]

    def insert_many(self, entities: Sequence[T]) -> int:
        """Insert entities in one transaction.

        Returns:
            Number of entities inserted
        """
        if not entities:
            return 0

        self._execute([self._insert_statement(entities)])
        logger.info(
            "REPOSITORY_ROWS_INSERTED",
            extra={"table_name": self.table_name, "row_count": len(entities)}
        )
        return len(entities)

    def replace_all(self, entities: Sequence[T]) -> int:
        """Swap the table contents for ``entities`` in a single transaction.

        If the insert fails the delete is rolled back with it, so readers
        never see an emptied table.

        Returns:
            Number of entities inserted
        """
        statements: List[Statement] = [(f"DELETE FROM {self.table_name}", None)]
        if entities:
            statements.append(self._insert_statement(entities))
        deleted = self._execute(statements)[0]

        logger.info(
            "REPOSITORY_TABLE_REPLACED",
            extra={
                "table_name": self.table_name,
                "deleted_count": deleted,
                "row_count": len(entities),
            }
        )
        return len(entities)

    def count(self) -> int:
        rows = self._fetch(f"SELECT COUNT(*) FROM {self.table_name}")
        return rows[0][0] if rows else 0


class RatingRepository(BaseRepository[RatingRow]):
    """Repository for historical survey ratings."""

    columns = (
        "id", "country", "year", "rating",
        "age", "gender", "occupation", "family_history",
    )

    SCHEMA_STATEMENTS = (
        """
        CREATE TABLE IF NOT EXISTS ratings (
            id SERIAL PRIMARY KEY,
            country TEXT NOT NULL,
            year TEXT NOT NULL,
            rating DOUBLE PRECISION NOT NULL,
            age TEXT,
            gender TEXT,
            occupation TEXT,
            family_history TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """,
        "CREATE INDEX IF NOT EXISTS ratings_country_idx ON ratings (country)",
        "CREATE INDEX IF NOT EXISTS ratings_rating_idx ON ratings (rating)",
    )

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, "ratings")

    def _row_to_entity(self, row: tuple) -> RatingRow:
        return RatingRow(
            id=row[0],
            country=row[1],
            year=row[2],
            rating=row[3],
            age=row[4],
            gender=row[5],
            occupation=row[6],
            family_history=row[7],
        )

    def _entity_to_params(self, entity: RatingRow) -> Dict[str, Any]:
        return {
            "country": entity.country,
            "year": entity.year,
            "rating": entity.rating,
            "age": entity.age,
            "gender": entity.gender,
            "occupation": entity.occupation,
            "family_history": entity.family_history,
        }

    def ensure_schema(self) -> None:
        """Create the ratings table and its lookup indexes if missing."""
        self._execute([(statement, None) for statement in self.SCHEMA_STATEMENTS])
        logger.info("RATINGS_SCHEMA_ENSURED", extra={"table_name": self.table_name})

    def fetch_observations(self) -> List[HistoricalObservation]:
        """Load every numeric rating as a HistoricalObservation.

        Rows that fail observation validation are skipped.

        Returns:
            All valid observations
        """
        rows = self._fetch(
            f"SELECT country, rating FROM {self.table_name} WHERE rating IS NOT NULL"
        )
        observations = []
        for country, rating in rows:
            observation = coerce_observation({"Country": country, "Rating": rating})
            if observation is not None:
                observations.append(observation)

        logger.info(
            "RATINGS_OBSERVATIONS_FETCHED",
            extra={
                "row_count": len(rows),
                "observation_count": len(observations),
            }
        )
        return observations
