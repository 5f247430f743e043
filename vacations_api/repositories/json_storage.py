"""
JSON document store with a chainable collection API.

The whole database is one JSON document made of top-level arrays. Handlers
reach records through ``store.get("bookings").find({"id": ...}).value()``
and persist with ``.write()``, which rewrites the whole file through a
temporary file and a rename. There is no index and no isolation: every
request mutates the same in-memory document and the last write wins.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union
import json
import logging
import os
import threading

from vacations_api.core.config import get_settings

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "users",
    "sessions",
    "trips",
    "bookings",
    "favorites",
    "promotions",
    "activities",
    "notifications",
    "notificationPreferences",
    "permissions",
    "roles",
    "roleAssignments",
    "trainingCourses",
    "employeeTraining",
    "policies",
    "policyAcknowledgments",
    "auditLogs",
    "twoFactorSetups",
    "twoFactorCodes",
)

Query = Union[Mapping[str, Any], Callable[[dict], bool]]


class StorageError(Exception):
    """Raised when the data file cannot be written."""


def empty_document() -> dict:
    return {name: [] for name in COLLECTIONS}


def db_defaults(db: dict) -> dict:
    for name in COLLECTIONS:
        if not isinstance(db.get(name), list):
            db[name] = []
    return db


def load(path: Path) -> Optional[dict]:
    """Return the parsed document, or None when the file does not exist."""
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s, starting from an empty document: %s", path, exc)
        return empty_document()
    if not isinstance(data, dict):
        logger.error("Unexpected top-level value in %s, starting from an empty document", path)
        return empty_document()
    return db_defaults(data)


def save(path: Path, db: dict) -> None:
    """Serialize to <path>.tmp and rename it over path."""
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(db, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Could not write %s: %s", path, exc)
        raise StorageError(f"could not write {path}") from exc


def _matcher(query: Query) -> Callable[[dict], bool]:
    if callable(query):
        return query
    items = tuple(query.items())
    return lambda record: all(record.get(key) == value for key, value in items)


class Pending:
    """Result of a mutating call; ``write()`` persists the document."""

    def __init__(self, store: "JsonStore", result: Any = None) -> None:
        self._store = store
        self._result = result

    def value(self) -> Any:
        return self._result

    def write(self) -> Any:
        self._store.write()
        return self._result


class Cursor:
    def __init__(self, store: "JsonStore", name: str, query: Optional[Query] = None, *, many: bool = False,
                 mapper: Optional[Callable[[dict], Any]] = None) -> None:
        self._store = store
        self._name = name
        self._match = _matcher(query) if query is not None else (lambda record: True)
        self._many = many
        self._mapper = mapper

    def _records(self) -> list:
        return self._store.data[self._name]

    def value(self) -> Any:
        if self._mapper is not None:
            return [self._mapper(record) for record in self._records()]
        if self._many:
            return [record for record in self._records() if self._match(record)]
        return next((record for record in self._records() if self._match(record)), None)

    def assign(self, updates: Mapping[str, Any]) -> Pending:
        """Shallow-merge updates into the first matching record."""
        record = next((r for r in self._records() if self._match(r)), None)
        if record is not None:
            record.update(updates)
        return Pending(self._store, record)


class Collection:
    def __init__(self, store: "JsonStore", name: str) -> None:
        self._store = store
        self._name = name

    def value(self) -> list:
        return self._store.data[self._name]

    def size(self) -> int:
        return len(self.value())

    def find(self, query: Query) -> Cursor:
        return Cursor(self._store, self._name, query)

    def filter(self, query: Query) -> Cursor:
        return Cursor(self._store, self._name, query, many=True)

    def map(self, fn: Callable[[dict], Any]) -> Cursor:
        return Cursor(self._store, self._name, mapper=fn)

    def push(self, item: dict) -> Pending:
        self.value().append(item)
        return Pending(self._store, item)

    def insert(self, item: dict, index: int = 0) -> Pending:
        self.value().insert(index, item)
        return Pending(self._store, item)

    def remove(self, query: Query) -> Pending:
        """Drop every matching record; the Pending value is the removed list."""
        match = _matcher(query)
        records = self.value()
        removed = [r for r in records if match(r)]
        records[:] = [r for r in records if not match(r)]
        return Pending(self._store, removed)


class JsonStore:
    """Single in-memory document backed by one JSON file."""

    def __init__(self, path: Path | str, seed: Optional[Callable[[], dict]] = None) -> None:
        self.path = Path(path)
        self._seed = seed
        self._write_lock = threading.Lock()
        self.data: dict = empty_document()
        self.read()

    def read(self) -> dict:
        loaded = load(self.path)
        if loaded is None:
            self.data = db_defaults(self._seed()) if self._seed else empty_document()
            self.write()
            logger.info("Initialized %s", self.path)
        else:
            self.data = loaded
        return self.data

    def write(self) -> None:
        with self._write_lock:
            save(self.path, self.data)

    def get(self, name: str) -> Collection:
        if name not in self.data:
            raise KeyError(f"unknown collection: {name}")
        return Collection(self, name)


@lru_cache
def get_store() -> JsonStore:
    settings = get_settings()
    seed = None
    if settings.seed_on_startup:
        from vacations_api.domain.seed import build_seed_document

        seed = build_seed_document
    return JsonStore(settings.data_file, seed=seed)
