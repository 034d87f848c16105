"""
Warehouse error taxonomy.

ClickHouse driver exceptions are translated into three conditions callers
must be able to tell apart: the server cannot be reached, the database or
table has not been provisioned, or a query failed for another reason.
"""
import re

from clickhouse_connect.driver.exceptions import OperationalError


LOAD_COMMAND = "python -m warehouse.src.orchestrator"

# ClickHouse error codes 60 (UNKNOWN_TABLE) and 81 (UNKNOWN_DATABASE)
_SCHEMA_MISSING = re.compile(
    r"UNKNOWN_TABLE|UNKNOWN_DATABASE|Code:\s*(60|81)\b|"
    r"(table|database) .* (doesn't|does not) exist",
    re.IGNORECASE,
)


class WarehouseError(Exception):
    """Base class for warehouse failures."""

    error_type = "warehouse_error"
    retryable = False
    hint = "Check server logs for details"


class WarehouseUnreachable(WarehouseError):
    """Connection-level failure talking to ClickHouse."""

    error_type = "warehouse_unreachable"
    retryable = True
    hint = "ClickHouse is not reachable. Ensure the ClickHouse service is running."


class SchemaMissing(WarehouseError):
    """The weather_dw database or one of its tables does not exist."""

    error_type = "schema_missing"
    hint = f"The warehouse schema is missing. Run the warehouse load: {LOAD_COMMAND}"


class WarehouseQueryError(WarehouseError):
    """Any other server-side query failure."""

    error_type = "warehouse_query_error"


def translate_error(exc: Exception) -> WarehouseError:
    """
    Map a driver exception onto the warehouse error taxonomy.

    Args:
        exc: Exception raised by clickhouse_connect or the network stack

    Returns:
        WarehouseError subclass instance carrying the original message
    """
    if isinstance(exc, WarehouseError):
        return exc

    message = str(exc) or exc.__class__.__name__

    if _SCHEMA_MISSING.search(message):
        return SchemaMissing(message)

    if isinstance(exc, (OperationalError, ConnectionError, TimeoutError, OSError)):
        return WarehouseUnreachable(message)

    return WarehouseQueryError(message)
