import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from config import settings
from errors import DuplicateValue, StaleWrite
from seed import seed_demo_data


class Collection:
    """In-memory document collection.

    Documents are plain dicts keyed by ``id``. Every write stamps
    ``updated_at`` and bumps ``version``; ``update_one`` refuses to apply when
    the caller's ``expected_version`` is behind the stored one. Callers always
    get copies, never the stored dict.
    """

    def __init__(self, name: str, lock: threading.RLock, indexes: Iterable[str] = ()):
        self.name = name
        self._lock = lock
        self._docs: dict[str, dict] = {}
        self._indexes: dict[str, dict[Any, set[str]]] = {field: {} for field in indexes}

    def _index_add(self, doc: dict) -> None:
        for field, index in self._indexes.items():
            index.setdefault(doc.get(field), set()).add(doc["id"])

    def _index_remove(self, doc: dict) -> None:
        for field, index in self._indexes.items():
            ids = index.get(doc.get(field))
            if ids is not None:
                ids.discard(doc["id"])
                if not ids:
                    del index[doc.get(field)]

    def _candidates(self, query: dict) -> Iterable[dict]:
        for field, value in query.items():
            if field in self._indexes:
                return [self._docs[i] for i in self._indexes[field].get(value, ())]
        return self._docs.values()

    def insert_one(self, doc: dict) -> dict:
        now = datetime.now(timezone.utc)
        doc = copy.deepcopy(doc)
        doc.setdefault("id", uuid.uuid4().hex)
        doc.setdefault("created_at", now)
        doc.setdefault("updated_at", now)
        doc["version"] = 1
        with self._lock:
            if doc["id"] in self._docs:
                raise DuplicateValue(f"{self.name} {doc['id']} already exists")
            self._docs[doc["id"]] = doc
            self._index_add(doc)
        return copy.deepcopy(doc)

    def get(self, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self._docs.get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find(self, query: Optional[dict] = None, sort: Optional[str] = None, reverse: bool = False) -> list[dict]:
        query = query or {}
        with self._lock:
            items = [
                copy.deepcopy(doc)
                for doc in self._candidates(query)
                if all(doc.get(k) == v for k, v in query.items())
            ]
        if sort:
            items.sort(key=lambda d: (d.get(sort) is None, d.get(sort)), reverse=reverse)
        return items

    def find_one(self, query: dict) -> Optional[dict]:
        found = self.find(query)
        return found[0] if found else None

    def count(self, query: Optional[dict] = None) -> int:
        return len(self.find(query))

    def update_one(self, doc_id: str, changes: dict, expected_version: Optional[int] = None) -> Optional[dict]:
        with self._lock:
            current = self._docs.get(doc_id)
            if current is None:
                return None
            if expected_version is not None and current["version"] != expected_version:
                raise StaleWrite()
            self._index_remove(current)
            current.update(copy.deepcopy(changes))
            current["id"] = doc_id
            current["version"] += 1
            current["updated_at"] = datetime.now(timezone.utc)
            self._index_add(current)
            return copy.deepcopy(current)

    def delete_one(self, doc_id: str) -> bool:
        with self._lock:
            doc = self._docs.pop(doc_id, None)
            if doc is None:
                return False
            self._index_remove(doc)
            return True


class MemoryStore:
    """Process memory system of record, one instance per app (or per test)."""

    def __init__(self):
        self._lock = threading.RLock()
        self.users = Collection("users", self._lock, indexes=("username", "email"))
        self.locations = Collection("locations", self._lock)
        self.shifts = Collection("shifts", self._lock, indexes=("user_id", "location_id"))
        self.checkins = Collection("checkins", self._lock, indexes=("user_id",))
        self.swaps = Collection("swaps", self._lock, indexes=("requester_id",))
        self.timeoff = Collection("timeoff", self._lock, indexes=("user_id",))
        self.policy = Collection("policy", self._lock)

    def transaction(self) -> threading.RLock:
        """Hold the store lock across a read-check-write sequence."""
        return self._lock


_store: MemoryStore | None = None


async def get_db():
    global _store
    if _store is None:
        _store = MemoryStore()
        if settings.SEED_DEMO_DATA:
            seed_demo_data(_store)
    return _store
