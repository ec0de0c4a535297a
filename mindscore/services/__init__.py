"""MindScore services.

- scoring_service: weighted-sum questionnaire scorer
- ranking_service: distribution index, ranking, average cache and HTTP API
- ingestion_service: CSV import of historical ratings
"""
