"""MongoDB storage for raw API payloads and enriched observations."""
import logging
from typing import Any, Dict, List

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .config import MongoConfig

logger = logging.getLogger(__name__)


class DocumentStore:
    """Writes raw and enriched weather documents to MongoDB."""

    def __init__(self, config: MongoConfig):
        """Initialize document store.

        Args:
            config: MongoDB configuration
        """
        self.config = config
        self.client = MongoClient(
            config.uri,
            serverSelectionTimeoutMS=config.timeout_ms,
        )
        self.db = self.client[config.database]

    def save_raw_and_enriched(
        self,
        raw_doc: Dict[str, Any],
        enriched_docs: List[Dict[str, Any]],
    ) -> Dict[str, int]:
        """Insert one raw document and the enriched observations.

        Args:
            raw_doc: Raw API payload with request context
            enriched_docs: One document per hourly observation

        Returns:
            Counts of inserted raw and enriched documents

        Raises:
            PyMongoError: If an insert fails
        """
        raw_collection = self.db[self.config.raw_collection]
        enriched_collection = self.db[self.config.enriched_collection]

        try:
            raw_result = raw_collection.insert_one(raw_doc)
            raw_inserted = 1 if raw_result.inserted_id is not None else 0

            enriched_inserted = 0
            if enriched_docs:
                enriched_result = enriched_collection.insert_many(enriched_docs)
                enriched_inserted = len(enriched_result.inserted_ids)

        except PyMongoError as e:
            logger.error(f"Failed to store documents: {e}")
            raise

        logger.info(
            f"Inserted {raw_inserted} raw doc into "
            f"{self.config.database}.{self.config.raw_collection}"
        )
        logger.info(
            f"Inserted {enriched_inserted} enriched docs into "
            f"{self.config.database}.{self.config.enriched_collection}"
        )

        return {"raw": raw_inserted, "enriched": enriched_inserted}

    def close(self):
        self.client.close()
