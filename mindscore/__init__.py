"""MindScore: questionnaire rating and population percentile ranking."""

__version__ = "0.1.0"
