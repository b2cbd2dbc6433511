### app/exports/aggregator.py

"""
Youth Export Aggregator

Runs the primary youth profile query and one query per requested related
collection, then merges the related rows into each profile document.
The number of related queries never depends on how many profiles matched.
"""

from collections import defaultdict
from typing import Any, Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exports.builders.youth_builder import (
    OWNER_KEY,
    RelatedCollection,
    build_youth_export_query,
    requested_collections,
)
from app.exports.exceptions import AggregationError
from app.exports.schemas import YouthExportRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)


class YouthExportAggregator:
    """
    Builds one hierarchical document per matched youth profile.

    A document is the profile's columns keyed by camelCase field name plus
    one list per requested related collection.
    """

    def __init__(self, db: Session):
        self.db = db

    def aggregate(self, request: YouthExportRequest) -> List[Dict[str, Any]]:
        """
        Load matching profiles and attach requested related collections.

        Raises:
            AggregationError: If any query fails. Partial results are discarded.
        """
        try:
            rows = self.db.execute(build_youth_export_query(request)).mappings().all()
        except SQLAlchemyError as e:
            logger.error("Youth profile query failed: %s", e, exc_info=True)
            raise AggregationError("youth profiles", str(e)) from e

        documents = [dict(row) for row in rows]
        if not documents:
            logger.info("No youth profiles matched export filters")
            return []

        youth_ids = [document["id"] for document in documents]
        collections = requested_collections(request.include)

        logger.info(
            "Aggregating youth export",
            profiles=len(documents),
            collections=[collection.key for collection in collections],
        )

        for collection in collections:
            grouped = self._fetch_grouped(collection, youth_ids)
            for document in documents:
                document[collection.key] = grouped.get(document["id"], [])

        return documents

    def _fetch_grouped(
        self, collection: RelatedCollection, youth_ids: Sequence[int]
    ) -> Dict[int, List[Dict[str, Any]]]:
        """Run one collection query and group its rows by owning profile id."""
        try:
            rows = self.db.execute(collection.build_query(youth_ids)).mappings().all()
        except SQLAlchemyError as e:
            logger.error("Query for %s failed: %s", collection.key, e, exc_info=True)
            raise AggregationError(collection.key, str(e)) from e

        grouped: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        for row in rows:
            item = dict(row)
            grouped[item[OWNER_KEY]].append(item)

        logger.debug("Loaded related rows", collection=collection.key, rows=len(rows))
        return grouped
