"""
Weather Pipeline DAG

Orchestrates the hourly data pipeline:
1. Ingestion: Fetch Open-Meteo hourly history into MongoDB
2. Warehouse: Load enriched documents into ClickHouse and rebuild monthly_agg
3. Cache: Refresh the Redis monthly snapshot for each configured city

Schedule: Hourly, so every snapshot is rewritten before its TTL runs out
Catchup: Disabled (each run fetches a rolling window)
"""

from datetime import datetime, timedelta
from airflow import DAG
from airflow.operators.bash import BashOperator
from airflow.models import Variable
import yaml
import os

# Load DAG configuration
config_path = os.path.join(os.path.dirname(__file__), '..', 'config', 'dag_config.yaml')
with open(config_path, 'r') as f:
    config = yaml.safe_load(f)

# Default arguments for all tasks
default_args = {
    'owner': config['owner'],
    'depends_on_past': False,
    'email': config['email']['recipients'],
    'email_on_failure': config['email']['on_failure'],
    'email_on_retry': config['email']['on_retry'],
    'retries': config['retries']['ingestion'],
    'retry_delay': timedelta(minutes=config['retry_delay']['minutes']),
    'execution_timeout': timedelta(minutes=config['sla']['pipeline_minutes']),
}

# Create DAG
dag = DAG(
    'weather_pipeline',
    default_args=default_args,
    description='Open-Meteo -> MongoDB -> ClickHouse -> Redis weather pipeline',
    schedule=config['schedule'],
    start_date=datetime(2024, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=['weather', 'hourly'],
)

# Environment variables for service commands
common_env = {
    'MONGO_URI': Variable.get('MONGO_URI', default_var='mongodb://mongo:27017'),
    'MONGO_DB': Variable.get('MONGO_DB', default_var='weather'),
    'CLICKHOUSE_URL': Variable.get('CLICKHOUSE_URL', default_var='http://clickhouse:8123'),
    'REDIS_URL': Variable.get('REDIS_URL', default_var='redis://redis:6379'),
    'TEAM_NAME': Variable.get('TEAM_NAME', default_var='UnknownTeam'),
    'REDIS_TTL_SEC': Variable.get('REDIS_TTL_SEC', default_var='3600'),
}


def create_cache_refresh_task(city: str) -> BashOperator:
    """Create cache refresh task for a city."""
    task_city = city.lower().replace(' ', '_')
    return BashOperator(
        task_id=f'refresh_cache_{task_city}',
        bash_command=f"""
        cd {config['services_dir']} && \
        python -m cache_sync.src.refresh --city "{city}"
        """,
        env=common_env,
        append_env=True,
        retries=config['retries']['cache'],
    )


with dag:
    # Stage 1: Ingestion
    ingest = BashOperator(
        task_id='ingest_open_meteo',
        bash_command=f"""
        cd {config['services_dir']} && \
        python -m ingestion.src.orchestrator --hours-back {config['ingestion']['hours_back']}
        """,
        env=common_env,
        append_env=True,
        retries=config['retries']['ingestion'],
    )

    # Stage 2: Warehouse load
    load_warehouse = BashOperator(
        task_id='load_warehouse',
        bash_command=f"""
        cd {config['services_dir']} && \
        python -m warehouse.src.orchestrator
        """,
        env=common_env,
        append_env=True,
        retries=config['retries']['warehouse'],
    )

    # Stage 3: Cache refresh, one task per city
    refresh_tasks = [create_cache_refresh_task(city) for city in config['cities']]

    ingest >> load_warehouse >> refresh_tasks
