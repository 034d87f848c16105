"""
Orchestration and CLI for the warehouse load.

This module coordinates the load pipeline:
1. Ensure the ClickHouse database and tables exist
2. Read enriched observation documents from MongoDB
3. Transform documents into daily_weather rows and insert them
4. Rebuild the monthly_agg analytics table
5. Collect and report metrics
"""
import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import MongoClient

from .clickhouse_writer import ClickHouseWriter
from .config import WarehouseConfig
from .reader import create_client
from .transform import to_daily_rows


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


class WarehouseLoadOrchestrator:
    """Orchestrates the MongoDB -> ClickHouse warehouse load."""

    def __init__(
        self,
        config: WarehouseConfig,
        mongo_client: Optional[MongoClient] = None,
        clickhouse_client=None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Configuration object
            mongo_client: Optional MongoDB client (created from config otherwise)
            clickhouse_client: Optional ClickHouse client (created from config otherwise)
        """
        self.config = config
        self.mongo_client = mongo_client
        self.clickhouse_client = clickhouse_client
        self.writer: Optional[ClickHouseWriter] = None

    def setup_components(self):
        """Initialize all pipeline components."""
        if self.mongo_client is None:
            self.mongo_client = MongoClient(
                self.config.mongo_uri,
                serverSelectionTimeoutMS=self.config.mongo_timeout_ms,
            )
        if self.clickhouse_client is None:
            self.clickhouse_client = create_client(self.config)

        self.writer = ClickHouseWriter(
            self.clickhouse_client,
            database=self.config.clickhouse_database,
            sync_interval_min=self.config.sync_interval_min,
            load_mode=self.config.load_mode,
        )

    def load_documents(self, batch_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read enriched documents from MongoDB.

        Args:
            batch_id: Only load documents from this ingestion batch

        Returns:
            List of documents
        """
        collection = self.mongo_client[self.config.mongo_db][
            self.config.mongo_collection_enriched
        ]

        query = {"metadata.etl_batch_id": batch_id} if batch_id else {}

        logger.info(
            f"Reading {self.config.mongo_db}.{self.config.mongo_collection_enriched} "
            f"(filter: {query or 'none'})"
        )

        docs = list(collection.find(query, {"_id": 0}))
        logger.info(f"Loaded {len(docs)} MongoDB documents")
        return docs

    def run(self, batch_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Run the complete warehouse load.

        Args:
            batch_id: Optional ingestion batch filter

        Returns:
            Dictionary with pipeline metrics and status
        """
        start_time = time.time()

        metrics = {
            "batch_id": batch_id,
            "status": "running",
            "start_time": datetime.utcnow().isoformat(),
        }

        try:
            self.writer.ensure_schema()

            docs = self.load_documents(batch_id)
            metrics["documents"] = len(docs)

            if not docs:
                logger.info("No documents found. Stopping.")
                metrics["rows_inserted"] = 0
                metrics["skipped"] = 0
                metrics["status"] = "empty"
                return metrics

            load_time = datetime.utcnow().replace(microsecond=0)
            rows, skipped = to_daily_rows(
                docs,
                load_time=load_time,
                sync_interval_min=self.config.sync_interval_min,
                load_mode=self.config.load_mode,
            )
            metrics["skipped"] = skipped
            metrics["rows_inserted"] = self.writer.insert_daily(rows)

            self.writer.rebuild_monthly_agg()

            metrics["status"] = "success"

        except Exception as e:
            metrics["status"] = "failed"
            metrics["error"] = str(e)
            logger.error(f"Warehouse load failed: {e}", exc_info=True)
            raise

        finally:
            elapsed_time = time.time() - start_time
            metrics["elapsed_seconds"] = round(elapsed_time, 2)
            metrics["end_time"] = datetime.utcnow().isoformat()

        logger.info(
            f"Warehouse load completed in {metrics['elapsed_seconds']}s: "
            f"{metrics['rows_inserted']} rows inserted"
        )
        return metrics

    def cleanup(self):
        """Clean up resources."""
        if self.mongo_client is not None:
            self.mongo_client.close()
        if self.clickhouse_client is not None:
            self.clickhouse_client.close()


def main():
    """CLI entry point for the warehouse load."""
    parser = argparse.ArgumentParser(
        description="Load enriched observations from MongoDB into ClickHouse",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load every enriched document and rebuild monthly aggregates
  python -m warehouse.src.orchestrator

  # Load a single ingestion batch
  python -m warehouse.src.orchestrator --batch-id etl-1718000000000
        """
    )

    parser.add_argument(
        "--batch-id",
        help="Only load documents from this ingestion batch"
    )

    args = parser.parse_args()

    config = WarehouseConfig()
    orchestrator = WarehouseLoadOrchestrator(config)

    try:
        orchestrator.setup_components()
        metrics = orchestrator.run(batch_id=args.batch_id)

        print("\n" + "=" * 60)
        print("WAREHOUSE LOAD SUMMARY")
        print("=" * 60)
        print(f"Status:            {metrics['status']}")
        print(f"Documents Read:    {metrics.get('documents', 'N/A')}")
        print(f"Rows Inserted:     {metrics.get('rows_inserted', 'N/A')}")
        print(f"Skipped:           {metrics.get('skipped', 'N/A')}")
        print(f"Elapsed Time:      {metrics['elapsed_seconds']}s")
        print("=" * 60 + "\n")

        sys.exit(0)

    except Exception as e:
        logger.error(f"Warehouse load failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        orchestrator.cleanup()


if __name__ == "__main__":
    main()
