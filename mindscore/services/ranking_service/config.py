"""Ranking service configuration."""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RatingServiceConfig:
    """Configuration for the ratings HTTP service."""
    port: int = 5050
    default_page_limit: int = 1000
    max_page_limit: int = 10000
    load_index_on_startup: bool = True

    @classmethod
    def from_env(cls) -> "RatingServiceConfig":
        """Create config from environment variables.

        Environment variables:
            PORT: HTTP port (default 5050)
            RATINGS_PAGE_LIMIT: Default page size for /api/ratings (default 1000)
            RATINGS_MAX_PAGE_LIMIT: Largest page size honoured (default 10000)
            LOAD_INDEX_ON_STARTUP: Build the distribution index when the
                handler is created (default true)
        """
        return cls(
            port=int(os.getenv("PORT", "5050")),
            default_page_limit=int(os.getenv("RATINGS_PAGE_LIMIT", "1000")),
            max_page_limit=int(os.getenv("RATINGS_MAX_PAGE_LIMIT", "10000")),
            load_index_on_startup=os.getenv("LOAD_INDEX_ON_STARTUP", "true").lower() == "true",
        )
