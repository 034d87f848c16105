"""
Shared test doubles for the Redis and ClickHouse clients.

The stores are injected everywhere (reader factory, SnapshotStore client,
FastAPI dependencies), so these fakes replace them without patching.
"""

import math
from datetime import date, datetime, timedelta, timezone

import pytest


class FakeClock:
    """Controllable UTC clock shared by the fake cache and the refresh job."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)

    def timestamp(self) -> float:
        return self.now.timestamp()


class FakeRedis:
    """In-memory subset of redis.Redis (decode_responses=True) with expiry."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.values = {}
        self.expires_at = {}
        self.fail_with = None
        self.set_calls = 0

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _purge(self, key):
        expires_at = self.expires_at.get(key)
        if expires_at is not None and expires_at <= self.clock.timestamp():
            self.values.pop(key, None)
            self.expires_at.pop(key, None)

    def get(self, key):
        self._check()
        self._purge(key)
        return self.values.get(key)

    def set(self, key, value, ex=None):
        self._check()
        self.set_calls += 1
        self.values[key] = value
        if ex is not None:
            self.expires_at[key] = self.clock.timestamp() + ex
        else:
            self.expires_at.pop(key, None)
        return True

    def ttl(self, key):
        self._check()
        self._purge(key)
        if key not in self.values:
            return -2
        expires_at = self.expires_at.get(key)
        if expires_at is None:
            return -1
        return int(math.ceil(expires_at - self.clock.timestamp()))

    def exists(self, key):
        self._check()
        self._purge(key)
        return 1 if key in self.values else 0

    def ping(self):
        self._check()
        return True

    def close(self):
        pass


class FakeQueryResult:
    """Subset of clickhouse_connect QueryResult."""

    def __init__(self, rows):
        self.rows = list(rows)

    def named_results(self):
        for row in self.rows:
            yield dict(row)


class FakeClickHouseClient:
    """Answers the queries issued by WarehouseReader and records writes."""

    def __init__(self, monthly_rows=None, databases=("weather_dw",),
                 tables=("daily_weather", "monthly_agg"), error=None):
        self.monthly_rows = list(monthly_rows or [])
        self.databases = set(databases)
        self.tables = set(tables)
        self.error = error
        self.queries = []
        self.commands = []
        self.inserts = []
        self.closed = False

    def query(self, sql, parameters=None):
        parameters = parameters or {}
        self.queries.append((sql, parameters))
        if self.error is not None:
            raise self.error

        if "system.databases" in sql:
            name = parameters.get("database")
            return FakeQueryResult([{"name": name}] if name in self.databases else [])

        if "system.tables" in sql:
            name = parameters.get("table")
            exists = parameters.get("database") in self.databases and name in self.tables
            return FakeQueryResult([{"name": name}] if exists else [])

        if "SELECT 1" in sql:
            return FakeQueryResult([{"ok": 1}])

        if "count()" in sql:
            return FakeQueryResult([{"total": len(self.monthly_rows)}])

        rows = sorted(self.monthly_rows, key=lambda r: (r["city"], r["month"]))
        if "city" in parameters:
            rows = [r for r in rows if r["city"] == parameters["city"]]
        if "LIMIT 1" in sql:
            rows = rows[:1]
        return FakeQueryResult(rows)

    def command(self, sql, parameters=None):
        self.commands.append((sql, parameters))
        if self.error is not None:
            raise self.error
        return None

    def insert(self, table, data, column_names=None, database=None):
        if self.error is not None:
            raise self.error
        self.inserts.append({
            "table": table,
            "data": data,
            "column_names": column_names,
            "database": database,
        })

    def close(self):
        self.closed = True


def make_monthly_row(city, month, avg_temp_c, total_rain_mm,
                     load_time=datetime(2024, 4, 1, 8, 30, 0)):
    return {
        "city": city,
        "month": month,
        "avg_temp_c": avg_temp_c,
        "total_rain_mm": total_rain_mm,
        "warehouse_load_time": load_time,
    }


@pytest.fixture
def clock():
    """Controllable clock starting 2024-06-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    """In-memory Redis sharing the test clock."""
    return FakeRedis(clock)


@pytest.fixture
def stockton_rows():
    """Stockton monthly aggregates for Jan-Mar 2024 plus one row for another city."""
    return [
        make_monthly_row("Stockton", date(2024, 1, 1), 10.0, 52.3),
        make_monthly_row("Stockton", date(2024, 2, 1), 12.5, 61.0),
        make_monthly_row("Stockton", date(2024, 3, 1), 15.0, None),
        make_monthly_row("Lodi", date(2024, 1, 1), 9.0, 40.0),
    ]


@pytest.fixture
def fake_clickhouse(stockton_rows):
    """ClickHouse client fake preloaded with the Stockton rows."""
    return FakeClickHouseClient(monthly_rows=stockton_rows)


@pytest.fixture
def make_clickhouse():
    """Factory for ClickHouse client fakes with custom rows, schema or errors."""
    return FakeClickHouseClient
