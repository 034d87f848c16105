"""
Read access to the ClickHouse monthly aggregate table.

The reader owns no global connection. It is given a factory and creates the
client on first use, so that connection failures surface as
WarehouseUnreachable at query time and tests can inject a fake client.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

import clickhouse_connect
from clickhouse_connect.driver.client import Client

from .config import WarehouseConfig
from .errors import translate_error
from .rows import serialize_monthly_rows
from .schema import MONTHLY_COLUMNS, MONTHLY_TABLE


logger = logging.getLogger(__name__)


def create_client(config: WarehouseConfig) -> Client:
    """Open a ClickHouse HTTP client from configuration."""
    return clickhouse_connect.get_client(**config.clickhouse_client_kwargs)


class WarehouseReader:
    """Queries monthly aggregates and schema state from ClickHouse."""

    def __init__(
        self,
        client_factory: Callable[[], Client],
        database: str = "weather_dw",
    ):
        """
        Initialize reader.

        Args:
            client_factory: Callable returning a ClickHouse client
            database: Warehouse database name
        """
        self.client_factory = client_factory
        self.database = database
        self._client: Optional[Client] = None

    @classmethod
    def from_config(cls, config: WarehouseConfig) -> "WarehouseReader":
        return cls(lambda: create_client(config), database=config.clickhouse_database)

    @property
    def monthly_table(self) -> str:
        return f"{self.database}.{MONTHLY_TABLE}"

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = self.client_factory()
        return self._client

    def _query(
        self,
        sql: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run a query and return rows as dictionaries.

        Raises:
            WarehouseError: Translated driver failure
        """
        try:
            client = self._get_client()
            result = client.query(sql, parameters=parameters or {})
            return list(result.named_results())
        except Exception as e:
            error = translate_error(e)
            logger.error(f"Warehouse query failed ({error.error_type}): {e}")
            raise error from e

    def ping(self) -> bool:
        """Run a trivial query; raises WarehouseUnreachable when the server is down."""
        self._query("SELECT 1 AS ok")
        return True

    def database_exists(self) -> bool:
        rows = self._query(
            "SELECT name FROM system.databases WHERE name = {database:String}",
            {"database": self.database},
        )
        return len(rows) > 0

    def table_exists(self, table: str = MONTHLY_TABLE) -> bool:
        rows = self._query(
            "SELECT name FROM system.tables "
            "WHERE database = {database:String} AND name = {table:String}",
            {"database": self.database, "table": table},
        )
        return len(rows) > 0

    def count_rows(self) -> int:
        rows = self._query(f"SELECT count() AS total FROM {self.monthly_table} FINAL")
        return int(rows[0]["total"]) if rows else 0

    def fetch_all_monthly(self) -> List[Dict[str, Any]]:
        """
        Fetch every monthly aggregate row.

        Returns:
            JSON-safe rows ordered by city, month
        """
        columns = ", ".join(MONTHLY_COLUMNS)
        rows = self._query(
            f"SELECT {columns} FROM {self.monthly_table} FINAL ORDER BY city, month"
        )
        logger.info(f"Loaded {len(rows)} rows from {self.monthly_table}")
        return serialize_monthly_rows(rows)

    def fetch_monthly(self, city: str) -> List[Dict[str, Any]]:
        """
        Fetch monthly aggregates for one city.

        Args:
            city: City name, bound as a query parameter

        Returns:
            JSON-safe rows ordered by month ascending
        """
        columns = ", ".join(MONTHLY_COLUMNS)
        rows = self._query(
            f"SELECT {columns} FROM {self.monthly_table} FINAL "
            "WHERE city = {city:String} ORDER BY month ASC",
            {"city": city},
        )
        return serialize_monthly_rows(rows)

    def sample_row(self, city: str) -> Optional[Dict[str, Any]]:
        columns = ", ".join(MONTHLY_COLUMNS)
        rows = self._query(
            f"SELECT {columns} FROM {self.monthly_table} FINAL "
            "WHERE city = {city:String} LIMIT 1",
            {"city": city},
        )
        serialized = serialize_monthly_rows(rows)
        return serialized[0] if serialized else None

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
