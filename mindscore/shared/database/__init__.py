"""Database access for MindScore services.

Provides connection pooling, health checks, and the ratings repository
that feeds the distribution index and the average cache.
"""

from .connection import (
    DatabaseConfig,
    ConnectionManager,
    get_connection_manager,
)
from .repository import (
    BaseRepository,
    RatingRepository,
    RepositoryError,
)

__all__ = [
    "DatabaseConfig",
    "ConnectionManager",
    "get_connection_manager",
    "BaseRepository",
    "RatingRepository",
    "RepositoryError",
]
