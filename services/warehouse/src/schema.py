"""
ClickHouse DDL for the weather warehouse.

Both tables use ReplacingMergeTree so that reloading the same observations
or re-aggregating the same months replaces rows on the sorting key instead
of accumulating duplicates. Reads use FINAL to see the collapsed state.
"""

DAILY_TABLE = "daily_weather"
MONTHLY_TABLE = "monthly_agg"

CREATE_DATABASE = "CREATE DATABASE IF NOT EXISTS {database}"

CREATE_DAILY_WEATHER = """
    CREATE TABLE IF NOT EXISTS {database}.daily_weather
    (
        -- Core weather data
        date Date,
        observed_at DateTime,
        temperature_c Nullable(Float64),
        temperature_f Nullable(Float64),
        humidity_percent Nullable(Float64),
        rainfall_mm Nullable(Float64),
        wind_speed_mps Nullable(Float64),
        wind_gust_mps Nullable(Float64),

        -- Location
        city String,
        state String,

        -- Source metadata (document store)
        source_timestamp Nullable(DateTime),
        source_database String,
        data_quality String,
        api_request_id String,
        etl_batch_id String,

        -- Warehouse metadata
        warehouse_load_time DateTime,
        rows_loaded UInt32,
        sync_interval_min UInt16,
        load_mode LowCardinality(String)
    )
    ENGINE = ReplacingMergeTree(warehouse_load_time)
    PARTITION BY toYYYYMM(date)
    ORDER BY (city, observed_at)
"""

CREATE_MONTHLY_AGG = """
    CREATE TABLE IF NOT EXISTS {database}.monthly_agg
    (
        city String,
        month Date,
        avg_temp_c Nullable(Float64),
        total_rain_mm Nullable(Float64),

        warehouse_load_time DateTime,
        rows_loaded UInt32,
        load_mode LowCardinality(String),
        sync_interval_min UInt16
    )
    ENGINE = ReplacingMergeTree(warehouse_load_time)
    PARTITION BY toYYYYMM(month)
    ORDER BY (city, month)
"""

REBUILD_MONTHLY_AGG = """
    INSERT INTO {database}.monthly_agg
    SELECT
        city,
        toStartOfMonth(date) AS month,
        avg(temperature_c) AS avg_temp_c,
        sum(rainfall_mm) AS total_rain_mm,
        now() AS warehouse_load_time,
        count() AS rows_loaded,
        {{load_mode:String}} AS load_mode,
        {{sync_interval_min:UInt16}} AS sync_interval_min
    FROM {database}.daily_weather FINAL
    GROUP BY city, month
    ORDER BY city, month
"""

DAILY_COLUMNS = [
    "date",
    "observed_at",
    "temperature_c",
    "temperature_f",
    "humidity_percent",
    "rainfall_mm",
    "wind_speed_mps",
    "wind_gust_mps",
    "city",
    "state",
    "source_timestamp",
    "source_database",
    "data_quality",
    "api_request_id",
    "etl_batch_id",
    "warehouse_load_time",
    "rows_loaded",
    "sync_interval_min",
    "load_mode",
]

MONTHLY_COLUMNS = [
    "city",
    "month",
    "avg_temp_c",
    "total_rain_mm",
    "warehouse_load_time",
]
