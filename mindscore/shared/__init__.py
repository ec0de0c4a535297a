"""Shared models, errors and database access for MindScore services."""
