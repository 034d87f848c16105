"""Main ingestion orchestrator."""
import argparse
import json
import logging
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .config import IngestionConfig
from .openmeteo_client import OpenMeteoClient, combine_hourly
from .storage import DocumentStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


SOURCE_DATABASE = "open-meteo.com/archive"


class IngestionOrchestrator:
    """Orchestrates the ingestion of Open-Meteo history into MongoDB."""

    def __init__(
        self,
        config: IngestionConfig,
        client: Optional[OpenMeteoClient] = None,
        store: Optional[DocumentStore] = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Ingestion configuration
            client: Optional API client (created from config otherwise)
            store: Optional document store (created lazily from config otherwise)
        """
        self.config = config
        self.client = client or OpenMeteoClient(config.openmeteo, config.location)
        self.store = store

    def build_metadata(self, now: datetime) -> Dict[str, Any]:
        """Build the source metadata attached to every document of a batch."""
        return {
            "source_timestamp": now.isoformat(),
            "source_database": SOURCE_DATABASE,
            "data_quality": "as-provided",
            "api_request_id": None,
            "etl_batch_id": f"etl-{int(now.timestamp() * 1000)}",
        }

    def build_documents(
        self,
        payload: Dict[str, Any],
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Dict[str, Any]:
        """Build the raw document and enriched observation documents.

        Args:
            payload: Decoded API response
            start: Requested window start
            end: Requested window end
            now: Fetch time

        Returns:
            Dictionary with raw_doc, enriched_docs and metadata
        """
        location = self.config.location
        metadata = self.build_metadata(now)
        observations = combine_hourly(payload)

        raw_doc = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "fetched_at": now.isoformat(),
            "city": location.city,
            "state": location.state,
            "metadata": metadata,
            "payload": payload,
        }

        enriched_docs = [
            {
                **observation,
                "location": {"city": location.city, "state": location.state},
                "metadata": dict(metadata),
            }
            for observation in observations
        ]

        return {"raw_doc": raw_doc, "enriched_docs": enriched_docs, "metadata": metadata}

    def run(self, hours_back: Optional[int] = None, dry_run: bool = False) -> Dict[str, Any]:
        """Fetch the last hours of history and store them.

        Args:
            hours_back: Window size in hours (defaults to config.hours_back)
            dry_run: If True, fetch and transform but skip MongoDB writes

        Returns:
            Dictionary with ingestion statistics
        """
        start_time = time.time()
        hours_back = hours_back or self.config.hours_back

        now = datetime.now(timezone.utc)
        window_start = now - timedelta(hours=hours_back)

        logger.info(
            f"Starting ingestion for {self.config.location.city}: last {hours_back}h"
        )

        payload = self.client.fetch_hourly_history(window_start, now)
        documents = self.build_documents(payload, window_start, now, now)
        enriched_docs: List[Dict[str, Any]] = documents["enriched_docs"]

        logger.info(f"Observation count: {len(enriched_docs)}")

        stats = {
            "city": self.config.location.city,
            "start": window_start.isoformat(),
            "end": now.isoformat(),
            "etl_batch_id": documents["metadata"]["etl_batch_id"],
            "observations": len(enriched_docs),
            "raw_inserted": 0,
            "enriched_inserted": 0,
            "dry_run": dry_run,
            "sample": [
                {k: v for k, v in doc.items() if k not in ("location", "metadata")}
                for doc in enriched_docs[:3]
            ],
        }

        if dry_run:
            logger.info("Dry run: skipping MongoDB inserts")
        else:
            if self.store is None:
                self.store = DocumentStore(self.config.mongo)
            inserted = self.store.save_raw_and_enriched(documents["raw_doc"], enriched_docs)
            stats["raw_inserted"] = inserted["raw"]
            stats["enriched_inserted"] = inserted["enriched"]

        stats["elapsed_seconds"] = round(time.time() - start_time, 2)
        logger.info(f"Ingestion completed: {stats['observations']} observations")
        return stats

    def close(self):
        if self.store is not None:
            self.store.close()


def main():
    """CLI entry point for ingestion."""
    parser = argparse.ArgumentParser(
        description="Fetch hourly weather history from Open-Meteo into MongoDB"
    )
    parser.add_argument(
        "--hours-back",
        type=int,
        help="Hours of history to fetch (default: FETCH_HOURS_BACK or 24; 8760 for ~1 year)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and print a summary without writing to MongoDB"
    )
    args = parser.parse_args()

    config = IngestionConfig.from_env()
    orchestrator = IngestionOrchestrator(config)

    try:
        stats = orchestrator.run(hours_back=args.hours_back, dry_run=args.dry_run)
        print(json.dumps(stats, indent=2, default=str))
        sys.exit(0)
    except Exception as e:
        logger.error(f"Ingestion failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        orchestrator.close()


if __name__ == "__main__":
    main()
