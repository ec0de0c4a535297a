"""Core exception types shared across MindScore services."""


class MindScoreError(Exception):
    """Base exception for MindScore errors."""
    pass


class EmptyDistributionError(MindScoreError):
    """No valid historical observation was available to build an index."""
    pass


class IndexNotReadyError(MindScoreError):
    """Ranking was requested before a distribution index was loaded."""
    pass


class IngestionError(MindScoreError):
    """A ratings source could not be read."""
    pass
