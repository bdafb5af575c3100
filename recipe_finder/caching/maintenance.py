"""Storage statistics, age-based purge and the debug filename mapping.

These operations are maintenance aids, not part of the lookup chain. Unlike
the lookup chain, they surface persistence failures to the caller.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from recipe_finder.caching.persistent_store import (
    PersistentStore,
    StoreStats,
    format_timestamp,
)
from recipe_finder.data_layer.exceptions import PersistenceError

logger = logging.getLogger(__name__)

MAPPING_FILENAME = "filename_mapping.json"


@dataclass
class StorageStats:
    """Aggregate statistics across every store."""
    stores: List[StoreStats] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return sum(s.file_count for s in self.stores)

    @property
    def record_count(self) -> int:
        return sum(s.record_count for s in self.stores)

    @property
    def skipped_files(self) -> int:
        return sum(s.skipped_files for s in self.stores)

    @property
    def oldest_entry(self) -> Optional[datetime]:
        entries = [s.oldest_entry for s in self.stores if s.oldest_entry is not None]
        return min(entries) if entries else None

    @property
    def newest_entry(self) -> Optional[datetime]:
        entries = [s.newest_entry for s in self.stores if s.newest_entry is not None]
        return max(entries) if entries else None

    @property
    def distinct_queries(self) -> List[str]:
        queries = set()
        for store_stats in self.stores:
            queries.update(store_stats.distinct_queries)
        return sorted(queries)

    def to_dict(self) -> Dict[str, Any]:
        oldest = self.oldest_entry
        newest = self.newest_entry
        return {
            "totalFiles": self.file_count,
            "totalRecords": self.record_count,
            "oldestEntry": format_timestamp(oldest) if oldest else None,
            "newestEntry": format_timestamp(newest) if newest else None,
            "searchQueries": self.distinct_queries,
            "skippedFiles": self.skipped_files,
            "stores": {s.kind: s.to_dict() for s in self.stores},
        }


class StorageMaintenance:
    """Maintenance operations over a set of stores sharing one directory.

    Usage:
        maintenance = StorageMaintenance(orchestrator.stores)
        maintenance.stats().to_dict()
        maintenance.purge_older_than(30)
        maintenance.rebuild_filename_mapping()
    """

    def __init__(self, stores: Sequence[PersistentStore[Any]]):
        if not stores:
            raise ValueError("StorageMaintenance needs at least one store")
        self.stores = list(stores)
        self._mapping_lock = threading.Lock()

    @property
    def mapping_path(self) -> Path:
        return self.stores[0].data_dir / MAPPING_FILENAME

    def stats(self) -> StorageStats:
        """Collect statistics from every store.

        Raises:
            PersistenceError: If the data directory cannot be read
        """
        return StorageStats(stores=[store.stats() for store in self.stores])

    def purge_older_than(self, days: float) -> Dict[str, int]:
        """Remove records older than *days* from every store.

        Returns:
            Number of files removed per store kind

        Raises:
            ValueError: If days is negative
            PersistenceError: If a directory scan or file removal fails
        """
        removed = {store.kind: store.purge_older_than(days) for store in self.stores}
        logger.info("Purge older than %s days removed %d files", days, sum(removed.values()))
        return removed

    def rebuild_filename_mapping(self) -> Dict[str, Dict[str, Any]]:
        """Write ``filename_mapping.json`` describing every stored file.

        Returns:
            The mapping that was written, keyed by filename

        Raises:
            PersistenceError: If the directory cannot be read or the mapping
                cannot be written
        """
        mapping: Dict[str, Dict[str, Any]] = {}
        for store in self.stores:
            for record in store.scan().records:
                mapping[record.filename] = {
                    "kind": store.kind,
                    "searchQuery": record.search_query,
                    "normalizedQuery": record.normalized_query,
                    "recordCount": record.item_count,
                    "lastUpdated": format_timestamp(record.last_updated),
                }

        path = self.mapping_path
        with self._mapping_lock:
            try:
                with open(path, "w", encoding="utf-8") as f:
                    json.dump(mapping, f, indent=2, sort_keys=True)
            except OSError as e:
                raise PersistenceError(f"Failed to write mapping file: {e}", path=str(path)) from e

        logger.info("Created filename mapping with %d entries", len(mapping))
        return mapping
