"""Disk-based, content-addressed JSON stores for provider results.

Each store maps a query onto one JSON file in a flat data directory. The
filename is derived from the normalized query, so every wording of the same
ingredient set shares a file. Three stores share the directory, separated
only by filename prefix:

    recipes_<hash12>.json       RecipeSearchStore (popular_recipes.json for "")
    ingredients_<hash12>.json   IngredientSearchStore
    recipe_details_<id>.json    RecipeDetailStore

DESIGN DECISIONS:
- JSON format, indented, for human readability and debuggability
- Whole-file overwrite on save; no merge, no temp-file-and-rename
- Freshness is checked at read time: a record older than the freshness
  window (7 days) is reported as absent, just like a missing or corrupt file
- Directory scans are best-effort: unreadable or unparseable files are
  skipped and counted, never fatal
- One reader/writer lock per store instance; no cross-process locking
"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from recipe_finder.caching.rwlock import ReadWriteLock
from recipe_finder.data_layer.exceptions import (
    InvalidQueryError,
    PersistenceError,
    RecordNotFoundError,
)
from recipe_finder.data_layer.models import Ingredient, Recipe, RecipeDetails
from recipe_finder.ingestion.query_normalizer import hashed_filename, normalize_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DATA_DIR = "data"
STORE_FRESHNESS = timedelta(days=7)
SOURCE_TAG = "spoonacular"
POPULAR_RECIPES_FILENAME = "popular_recipes.json"
POPULAR_QUERY_LABEL = "popular"

_RECIPE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class StoredRecord(Generic[T]):
    """One persisted file: a payload plus the metadata it was saved with.

    Attributes:
        payload: Decoded payload (list of recipes, list of ingredients,
            or a single RecipeDetails)
        last_updated: When the record was written
        search_query: The query as the caller originally phrased it
        normalized_query: Canonical key the filename was derived from
        source: Provider tag
        filename: Name of the file inside the data directory
        item_count: Number of payload items in the record
    """
    payload: T
    last_updated: datetime
    search_query: str
    normalized_query: str
    source: str
    filename: str
    item_count: int = 0

    @property
    def display_query(self) -> str:
        return self.search_query or POPULAR_QUERY_LABEL


@dataclass
class ScanResult(Generic[T]):
    """Records found by a directory scan and the number of files skipped."""
    records: List[StoredRecord[T]] = field(default_factory=list)
    skipped_files: int = 0


@dataclass
class StoreStats:
    """Summary counts for one store, derived from a directory scan."""
    kind: str
    file_count: int = 0
    record_count: int = 0
    oldest_entry: Optional[datetime] = None
    newest_entry: Optional[datetime] = None
    distinct_queries: List[str] = field(default_factory=list)
    skipped_files: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "totalFiles": self.file_count,
            "totalRecords": self.record_count,
            "oldestEntry": format_timestamp(self.oldest_entry) if self.oldest_entry else None,
            "newestEntry": format_timestamp(self.newest_entry) if self.newest_entry else None,
            "searchQueries": list(self.distinct_queries),
            "skippedFiles": self.skipped_files,
        }


class PersistentStore(ABC, Generic[T]):
    """Base class for a content-addressed JSON store of one entity kind.

    Subclasses define the naming convention (``normalize_key``,
    ``filename_for_key``, ``owns_filename``) and payload encoding.

    Usage:
        store = RecipeSearchStore(data_dir="data")
        store.save("Milk, eggs", recipes)
        recipes = store.load("eggs,milk")  # same file, None if stale
    """

    kind: str = ""
    payload_field: str = ""
    source: str = SOURCE_TAG

    def __init__(
        self,
        data_dir: Optional[str] = None,
        freshness: timedelta = STORE_FRESHNESS,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize store with directory path.

        Args:
            data_dir: Directory for record files (created if not exists)
            freshness: Maximum record age still served by ``load``
            clock: Source of the current time (timezone-aware)
        """
        self.data_dir = Path(data_dir or DEFAULT_DATA_DIR)
        self.freshness = freshness
        self._clock = clock
        self._lock = ReadWriteLock()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create data directory %s: %s", self.data_dir, e)

    # ------------------------------------------------------------------
    # Naming convention and encoding
    # ------------------------------------------------------------------

    def normalize_key(self, key: str) -> str:
        return normalize_query(key)

    @abstractmethod
    def filename_for_key(self, normalized_key: str) -> str:
        """Return the filename for an already-normalized key."""

    @abstractmethod
    def owns_filename(self, filename: str) -> bool:
        """Return True if *filename* follows this store's naming convention."""

    @abstractmethod
    def _encode_payload(self, payload: T) -> Any:
        ...

    @abstractmethod
    def _decode_payload(self, raw: Any) -> T:
        ...

    @abstractmethod
    def _count_items(self, payload: T) -> int:
        ...

    @abstractmethod
    def _payload_items(self, payload: T) -> List[Any]:
        ...

    def filename_for(self, key: str) -> str:
        """Derive the filename for a raw query (normalizing it first)."""
        return self.filename_for_key(self.normalize_key(key))

    def path_for(self, key: str) -> Path:
        return self.data_dir / self.filename_for(key)

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def save(
        self,
        key: str,
        payload: T,
        normalized_key: Optional[str] = None
    ) -> StoredRecord[T]:
        """Write a record for *key*, replacing any existing file.

        Args:
            key: Query as phrased by the caller
            payload: Payload to persist
            normalized_key: Precomputed normalized key (derived if omitted)

        Returns:
            The record that was written

        Raises:
            PersistenceError: If the record cannot be serialized or written
        """
        normalized = self.normalize_key(key) if normalized_key is None else normalized_key
        filename = self.filename_for_key(normalized)
        path = self.data_dir / filename
        record = StoredRecord(
            payload=payload,
            last_updated=self._clock(),
            search_query=key,
            normalized_query=normalized,
            source=self.source,
            filename=filename,
            item_count=self._count_items(payload),
        )

        with self._lock.write_locked():
            try:
                document = json.dumps(self._to_document(record), indent=2)
            except (TypeError, ValueError) as e:
                raise PersistenceError(
                    f"Failed to serialize {self.kind} record: {e}", path=str(path)
                ) from e
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                with open(path, "w", encoding="utf-8") as f:
                    f.write(document)
            except OSError as e:
                raise PersistenceError(
                    f"Failed to write {self.kind} record: {e}", path=str(path)
                ) from e

        logger.info(
            "Saved %d %s to %s (query: %s)", record.item_count, self.kind, filename, key
        )
        return record

    def load_record(self, key: str) -> Optional[StoredRecord[T]]:
        """Return the fresh record for *key*, or None.

        Missing, corrupt and stale files are all reported as None.
        """
        try:
            return self._load_fresh(key)
        except RecordNotFoundError:
            return None

    def load(self, key: str) -> Optional[T]:
        """Return the fresh payload stored for *key*, or None.

        Args:
            key: Raw or normalized query

        Returns:
            The payload if a fresh record exists, None otherwise
        """
        record = self.load_record(key)
        return record.payload if record is not None else None

    def require(self, key: str) -> T:
        """Return the fresh payload for *key*.

        Raises:
            RecordNotFoundError: If the record is missing, corrupt or stale
        """
        return self._load_fresh(key).payload

    def is_fresh(self, record: StoredRecord[Any]) -> bool:
        return self._clock() - record.last_updated <= self.freshness

    def _load_fresh(self, key: str) -> StoredRecord[T]:
        normalized = self.normalize_key(key)
        filename = self.filename_for_key(normalized)
        path = self.data_dir / filename

        with self._lock.read_locked():
            if not path.exists():
                logger.debug("No stored %s for '%s' (%s)", self.kind, key, filename)
                raise RecordNotFoundError(key, filename, "missing")
            try:
                record = self._read_file(path)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("Ignoring corrupt %s file %s: %s", self.kind, filename, e)
                raise RecordNotFoundError(key, filename, "corrupt") from e

        if not self.is_fresh(record):
            logger.info(
                "Stored %s for '%s' is older than %s, will refresh",
                self.kind, key, self.freshness
            )
            raise RecordNotFoundError(key, filename, "stale")

        logger.debug(
            "Loaded %d %s from %s (query: %s)", record.item_count, self.kind, filename, key
        )
        return record

    # ------------------------------------------------------------------
    # Directory scans
    # ------------------------------------------------------------------

    def scan(self) -> ScanResult[T]:
        """Parse every file owned by this store.

        Returns:
            ScanResult with parsed records (sorted by filename) and the
            number of files that could not be read or parsed

        Raises:
            PersistenceError: If the data directory cannot be listed
        """
        with self._lock.read_locked():
            return self._scan_unlocked()

    def list_all(self) -> List[Any]:
        """Return the payload items of every stored record, concatenated."""
        items: List[Any] = []
        for record in self.scan().records:
            items.extend(self._payload_items(record.payload))
        return items

    def purge_older_than(self, days: float) -> int:
        """Delete every record last updated before ``now - days``.

        Args:
            days: Age threshold in days

        Returns:
            Number of files removed

        Raises:
            ValueError: If days is negative
            PersistenceError: If the directory cannot be listed or a file
                cannot be removed
        """
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        cutoff = self._clock() - timedelta(days=days)
        removed = 0

        with self._lock.write_locked():
            scan = self._scan_unlocked()
            for record in scan.records:
                if record.last_updated >= cutoff:
                    continue
                path = self.data_dir / record.filename
                try:
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    raise PersistenceError(
                        f"Failed to remove {record.filename}: {e}", path=str(path)
                    ) from e
                removed += 1
                logger.info("Removed old data file: %s", record.filename)

        if removed:
            logger.info("Cleaned %d old %s files", removed, self.kind)
        return removed

    def stats(self) -> StoreStats:
        """Summarize the store by scanning all of its files."""
        scan = self.scan()
        stats = StoreStats(kind=self.kind, skipped_files=scan.skipped_files)
        stats.file_count = len(scan.records) + scan.skipped_files
        queries = set()
        for record in scan.records:
            stats.record_count += record.item_count
            if stats.oldest_entry is None or record.last_updated < stats.oldest_entry:
                stats.oldest_entry = record.last_updated
            if stats.newest_entry is None or record.last_updated > stats.newest_entry:
                stats.newest_entry = record.last_updated
            queries.add(record.display_query)
        stats.distinct_queries = sorted(queries)
        return stats

    def _scan_unlocked(self) -> ScanResult[T]:
        try:
            filenames = sorted(
                entry.name for entry in os.scandir(self.data_dir)
                if entry.is_file() and self.owns_filename(entry.name)
            )
        except OSError as e:
            raise PersistenceError(
                f"Failed to read data directory: {e}", path=str(self.data_dir)
            ) from e

        result: ScanResult[T] = ScanResult()
        for filename in filenames:
            try:
                result.records.append(self._read_file(self.data_dir / filename))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.debug("Skipping unreadable %s file %s: %s", self.kind, filename, e)
                result.skipped_files += 1
        return result

    # ------------------------------------------------------------------
    # Document encoding
    # ------------------------------------------------------------------

    def _to_document(self, record: StoredRecord[T]) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "lastUpdated": format_timestamp(record.last_updated),
            "searchQuery": record.search_query,
            "normalizedQuery": record.normalized_query,
            "source": record.source,
            "filename": record.filename,
            self.payload_field: self._encode_payload(record.payload),
        }

    def _read_file(self, path: Path) -> StoredRecord[T]:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("record document is not a JSON object")
        payload = self._decode_payload(data[self.payload_field])
        return StoredRecord(
            payload=payload,
            last_updated=parse_timestamp(data["lastUpdated"]),
            search_query=data.get("searchQuery", ""),
            normalized_query=data.get("normalizedQuery", ""),
            source=data.get("source", self.source),
            filename=path.name,
            item_count=self._count_items(payload),
        )


class _ListStore(PersistentStore[List[T]]):
    """Store whose payload is a list of model objects."""

    item_type: Any = None

    def _encode_payload(self, payload: List[T]) -> Any:
        return [item.to_dict() for item in payload]

    def _decode_payload(self, raw: Any) -> List[T]:
        if not isinstance(raw, list):
            raise ValueError(f"'{self.payload_field}' must be a list")
        return [self.item_type.from_dict(item) for item in raw]

    def _count_items(self, payload: List[T]) -> int:
        return len(payload)

    def _payload_items(self, payload: List[T]) -> List[Any]:
        return list(payload)


class RecipeSearchStore(_ListStore[Recipe]):
    """Recipe result sets, one file per normalized ingredient set.

    The empty query is reserved for the popular/default recipe bucket and
    maps to ``popular_recipes.json``.
    """

    kind = "recipes"
    payload_field = "recipes"
    item_type = Recipe
    filename_prefix = "recipes"

    def filename_for_key(self, normalized_key: str) -> str:
        if normalized_key == "":
            return POPULAR_RECIPES_FILENAME
        return hashed_filename(self.filename_prefix, normalized_key)

    def owns_filename(self, filename: str) -> bool:
        if filename == POPULAR_RECIPES_FILENAME:
            return True
        return filename.startswith(self.filename_prefix + "_") and filename.endswith(".json")


class IngredientSearchStore(_ListStore[Ingredient]):
    """Ingredient autocomplete results, one file per normalized query."""

    kind = "ingredients"
    payload_field = "ingredients"
    item_type = Ingredient
    filename_prefix = "ingredients"

    def filename_for_key(self, normalized_key: str) -> str:
        return hashed_filename(self.filename_prefix, normalized_key)

    def owns_filename(self, filename: str) -> bool:
        return filename.startswith(self.filename_prefix + "_") and filename.endswith(".json")


class RecipeDetailStore(PersistentStore[RecipeDetails]):
    """Single recipe detail records, addressed directly by recipe id."""

    kind = "recipe details"
    payload_field = "recipe_details"
    filename_prefix = "recipe_details"
    source = "spoonacular_details"

    def normalize_key(self, key: str) -> str:
        """Validate and trim a recipe id.

        Raises:
            InvalidQueryError: If the id is empty or contains characters
                that are unsafe in a filename
        """
        recipe_id = (key or "").strip()
        if not _RECIPE_ID_PATTERN.match(recipe_id):
            raise InvalidQueryError(key, f"Invalid recipe id: '{key}'")
        return recipe_id

    def filename_for_key(self, normalized_key: str) -> str:
        return f"{self.filename_prefix}_{normalized_key}.json"

    def owns_filename(self, filename: str) -> bool:
        return filename.startswith(self.filename_prefix + "_") and filename.endswith(".json")

    def _encode_payload(self, payload: RecipeDetails) -> Any:
        return payload.to_dict()

    def _decode_payload(self, raw: Any) -> RecipeDetails:
        if not isinstance(raw, dict):
            raise ValueError("'recipe_details' must be an object")
        return RecipeDetails.from_dict(raw)

    def _count_items(self, payload: RecipeDetails) -> int:
        return 1

    def _payload_items(self, payload: RecipeDetails) -> List[Any]:
        return [payload]
