# Overview: Local key-value collection store; one JSON snapshot per collection.

"""
Collection Storage

Every collection (users, products, invoices, ...) is held as one ordered
JSON array under a named key. A collection is read once, on first use in an
application, and cached; every mutation rewrites the whole snapshot (last
write wins, no partial writes, no transaction log).

Backends:
- SqlBackend: rows in the storage_entries table (Flask-SQLAlchemy)
- MemoryBackend: a dict living as long as the application (tests, scratch runs)

A snapshot that cannot be parsed is replaced by the collection's seed data.
"""

from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .models.auth import User, SessionRecord
from .models.inventory import Product, Category, Brand
from .models.sales import Invoice
from .models.documents import PurchaseOrder, SalesReturn


T = TypeVar("T")

EXTENSION_KEY = "stockbook.store"

BACKEND_SQL = "sql"
BACKEND_MEMORY = "memory"

SESSION_KEY = "current_session"


class StorageBackend:
    """Raw string storage keyed by collection name."""

    def read(self, key: str) -> str | None:
        raise NotImplementedError

    def write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> list[str]:
        raise NotImplementedError

    def entries(self) -> list[dict]:
        return [{"key": key, "size": len(self.read(key) or ""), "updated_at": None} for key in self.keys()]


class MemoryBackend(StorageBackend):
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqlBackend(StorageBackend):
    """storage_entries rows; each write commits immediately and rolls back on failure."""

    @staticmethod
    def _commit() -> None:
        from .extensions import db

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    def read(self, key: str) -> str | None:
        from .extensions import db
        from .models.storage import StorageEntry

        entry = db.session.get(StorageEntry, key)
        return entry.value if entry else None

    def write(self, key: str, value: str) -> None:
        from .extensions import db
        from .models.storage import StorageEntry

        entry = db.session.get(StorageEntry, key)
        if entry is None:
            db.session.add(StorageEntry(key=key, value=value))
        else:
            entry.value = value
        self._commit()

    def delete(self, key: str) -> None:
        from .extensions import db
        from .models.storage import StorageEntry

        db.session.query(StorageEntry).filter_by(key=key).delete()
        self._commit()

    def keys(self) -> list[str]:
        from .extensions import db
        from .models.storage import StorageEntry

        return [row.key for row in db.session.query(StorageEntry.key).order_by(StorageEntry.key)]

    def entries(self) -> list[dict]:
        """Per-key size and last update, for the health check."""
        from .extensions import db
        from .models.storage import StorageEntry

        return [row.to_dict() for row in db.session.query(StorageEntry).order_by(StorageEntry.key)]


@dataclass(frozen=True)
class CollectionSpec:
    key: str
    record_type: type

    def seed(self) -> list:
        from . import seeds

        return seeds.seed_collection(self.key)


COLLECTIONS = {
    "users": CollectionSpec("users", User),
    "products": CollectionSpec("products", Product),
    "categories": CollectionSpec("categories", Category),
    "brands": CollectionSpec("brands", Brand),
    "invoices": CollectionSpec("invoices", Invoice),
    "purchase_orders": CollectionSpec("purchase_orders", PurchaseOrder),
    "returns": CollectionSpec("returns", SalesReturn),
}

_PARSE_ERRORS = (ValueError, KeyError, TypeError, AttributeError)


def new_record_id() -> str:
    """Opaque unique id for a new record."""
    return uuid.uuid4().hex


class CollectionRepository(Generic[T]):
    """
    CRUD over one collection.

    Reads hand out copies: a record is only changed in storage by passing it
    back through add/update/replace_all.
    """

    def __init__(self, spec: CollectionSpec, backend: StorageBackend):
        self.spec = spec
        self._backend = backend
        self._records: list[T] | None = None

    @property
    def key(self) -> str:
        return self.spec.key

    def _load(self) -> list[T]:
        if self._records is None:
            self._records = self._read_snapshot()
        return self._records

    def _read_snapshot(self) -> list[T]:
        raw = self._backend.read(self.key)
        if raw is None:
            records = self.spec.seed()
            self._write(records)
            return records

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("collection snapshot is not a list")
            return [self.spec.record_type.from_dict(item) for item in data]
        except _PARSE_ERRORS as exc:
            current_app.logger.warning(
                "Unreadable %s snapshot, resetting to seed data: %s", self.key, exc
            )
            records = self.spec.seed()
            self._write(records)
            return records

    def _write(self, records: list[T]) -> None:
        self._backend.write(self.key, json.dumps([r.to_dict() for r in records]))

    def _save(self, records: list[T]) -> None:
        """Write records, then make them the cached collection (only if the write succeeded)."""
        self._write(records)
        self._records = records

    def all(self) -> list[T]:
        return copy.deepcopy(self._load())

    def get(self, record_id: str) -> T | None:
        for record in self._load():
            if record.id == record_id:
                return copy.deepcopy(record)
        return None

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        """First record matching predicate, in collection order."""
        for record in self._load():
            if predicate(record):
                return copy.deepcopy(record)
        return None

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [copy.deepcopy(r) for r in self._load() if predicate(r)]

    def exists(self, record_id: str) -> bool:
        return any(r.id == record_id for r in self._load())

    def add(self, record: T) -> T:
        self._save(self._load() + [copy.deepcopy(record)])
        return record

    def update(self, record: T) -> T:
        records = list(self._load())
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = copy.deepcopy(record)
                self._save(records)
                return record
        raise KeyError(record.id)

    def update_many(self, updated: Iterable[T]) -> None:
        """Replace several records by id with a single snapshot write; unknown ids are skipped."""
        by_id = {r.id: copy.deepcopy(r) for r in updated}
        if not by_id:
            return
        self._save([by_id.get(r.id, r) for r in self._load()])

    def delete(self, record_id: str) -> T | None:
        records = list(self._load())
        for i, existing in enumerate(records):
            if existing.id == record_id:
                removed = records.pop(i)
                self._save(records)
                return removed
        return None

    def replace_all(self, records: Iterable[T]) -> None:
        self._save([copy.deepcopy(r) for r in records])

    def count(self) -> int:
        return len(self._load())

    def reload(self) -> None:
        """Drop the cache; the next read goes back to the backend."""
        self._records = None


class SessionRepository:
    """The current-session slot: a single record or nothing."""

    key = SESSION_KEY

    def __init__(self, backend: StorageBackend):
        self._backend = backend

    def get(self) -> SessionRecord | None:
        raw = self._backend.read(self.key)
        if raw is None:
            return None
        try:
            return SessionRecord.from_dict(json.loads(raw))
        except _PARSE_ERRORS as exc:
            current_app.logger.warning("Unreadable session snapshot, signing out: %s", exc)
            self.clear()
            return None

    def set(self, record: SessionRecord) -> SessionRecord:
        self._backend.write(self.key, json.dumps(record.to_dict()))
        return record

    def clear(self) -> None:
        self._backend.delete(self.key)


class _StoreState:
    """Per-application backend and repository cache."""

    def __init__(self, backend: StorageBackend | None = None):
        self._backend = backend
        self._repos: dict[str, CollectionRepository] = {}

    @property
    def backend(self) -> StorageBackend:
        if self._backend is None:
            self._backend = _make_backend(current_app.config.get("STORAGE_BACKEND", BACKEND_SQL))
        return self._backend

    def repository(self, name: str) -> CollectionRepository:
        repo = self._repos.get(name)
        if repo is None:
            repo = CollectionRepository(COLLECTIONS[name], self.backend)
            self._repos[name] = repo
        return repo

    def reload(self) -> None:
        for repo in self._repos.values():
            repo.reload()


def _make_backend(name: str) -> StorageBackend:
    if name == BACKEND_SQL:
        return SqlBackend()
    if name == BACKEND_MEMORY:
        return MemoryBackend()
    raise ValueError(f"Unknown STORAGE_BACKEND: {name!r}")


class DataStore:
    """
    Flask extension exposing one repository per collection.

    Usage (inside an app context):
        store.products.all()
        store.invoices.add(invoice)
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app, backend: StorageBackend | None = None) -> None:
        app.config.setdefault("STORAGE_BACKEND", BACKEND_SQL)
        app.extensions[EXTENSION_KEY] = _StoreState(backend)

    @property
    def _state(self) -> _StoreState:
        return current_app.extensions[EXTENSION_KEY]

    @property
    def backend(self) -> StorageBackend:
        return self._state.backend

    def repository(self, name: str) -> CollectionRepository:
        return self._state.repository(name)

    @property
    def users(self) -> CollectionRepository[User]:
        return self.repository("users")

    @property
    def products(self) -> CollectionRepository[Product]:
        return self.repository("products")

    @property
    def categories(self) -> CollectionRepository[Category]:
        return self.repository("categories")

    @property
    def brands(self) -> CollectionRepository[Brand]:
        return self.repository("brands")

    @property
    def invoices(self) -> CollectionRepository[Invoice]:
        return self.repository("invoices")

    @property
    def purchase_orders(self) -> CollectionRepository[PurchaseOrder]:
        return self.repository("purchase_orders")

    @property
    def returns(self) -> CollectionRepository[SalesReturn]:
        return self.repository("returns")

    @property
    def session(self) -> SessionRepository:
        return SessionRepository(self.backend)

    def reload(self) -> None:
        self._state.reload()

    def wipe(self) -> None:
        """Delete every stored key; collections come back as seed data on next read."""
        backend = self.backend
        for key in backend.keys():
            backend.delete(key)
        self.reload()
