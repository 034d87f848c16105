"""
Weather Warehouse Load Service

Loads enriched observations from MongoDB into ClickHouse, maintains the
monthly aggregate table, and provides read access to it.
"""

__version__ = "1.0.0"
