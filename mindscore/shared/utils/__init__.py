"""Shared utilities for MindScore services."""
from .rounding import round_half_even, round_half_up, round_optional

__all__ = ["round_half_even", "round_half_up", "round_optional"]
