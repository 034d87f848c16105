"""
ClickHouse writer for the weather warehouse tables.
"""
import logging
from typing import Any, Dict, List

from clickhouse_connect.driver.client import Client

from .errors import translate_error
from .schema import (
    CREATE_DAILY_WEATHER,
    CREATE_DATABASE,
    CREATE_MONTHLY_AGG,
    DAILY_COLUMNS,
    DAILY_TABLE,
    MONTHLY_TABLE,
    REBUILD_MONTHLY_AGG,
)
from .transform import rows_to_columns


logger = logging.getLogger(__name__)


class ClickHouseWriter:
    """Creates the warehouse schema and writes daily and monthly tables."""

    def __init__(
        self,
        client: Client,
        database: str = "weather_dw",
        sync_interval_min: int = 60,
        load_mode: str = "incremental",
    ):
        """
        Initialize writer.

        Args:
            client: ClickHouse client
            database: Warehouse database name
            sync_interval_min: Sync interval recorded on monthly rows
            load_mode: Load mode recorded on monthly rows
        """
        self.client = client
        self.database = database
        self.sync_interval_min = sync_interval_min
        self.load_mode = load_mode

    def _command(self, sql: str, parameters: Dict[str, Any] = None):
        try:
            return self.client.command(sql, parameters=parameters)
        except Exception as e:
            raise translate_error(e) from e

    def ensure_schema(self):
        """Create the database and both tables if they don't exist."""
        logger.info("Ensuring ClickHouse tables exist...")

        self._command(CREATE_DATABASE.format(database=self.database))
        self._command(CREATE_DAILY_WEATHER.format(database=self.database))
        self._command(CREATE_MONTHLY_AGG.format(database=self.database))

        logger.info("ClickHouse tables are ready")

    def insert_daily(self, rows: List[Dict[str, Any]]) -> int:
        """
        Insert observation rows into daily_weather.

        Args:
            rows: Rows produced by transform.to_daily_rows()

        Returns:
            Number of rows inserted
        """
        if not rows:
            logger.info("No daily rows to insert")
            return 0

        logger.info(f"Writing {len(rows)} rows to {self.database}.{DAILY_TABLE}...")

        try:
            self.client.insert(
                table=DAILY_TABLE,
                data=rows_to_columns(rows),
                column_names=DAILY_COLUMNS,
                database=self.database,
            )
        except Exception as e:
            raise translate_error(e) from e

        logger.info(f"Successfully wrote {len(rows)} rows to {DAILY_TABLE}")
        return len(rows)

    def rebuild_monthly_agg(self):
        """
        Recompute monthly aggregates from daily_weather.

        Rows for an existing (city, month) are replaced by the newer load,
        so repeated runs do not accumulate duplicates.
        """
        logger.info(f"Updating {self.database}.{MONTHLY_TABLE} analytics table...")

        self._command(
            REBUILD_MONTHLY_AGG.format(database=self.database),
            parameters={
                "load_mode": self.load_mode,
                "sync_interval_min": self.sync_interval_min,
            },
        )

        logger.info(f"{MONTHLY_TABLE} updated successfully")
