"""
Weather Ingestion Service

Fetches hourly weather history from the Open-Meteo archive and stores raw
and enriched documents in MongoDB.
"""

__version__ = "1.0.0"
