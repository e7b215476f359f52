from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_QUERY_BATCH_LIMIT
from ..core.exceptions import StoreError
from .base import Document, DocumentStore, Predicate, QueueSubscription


@dataclass(eq=False)
class _Watch:
    collection: str
    predicates: tuple[Predicate, ...]
    subscription: QueueSubscription
    last: list[Document] = field(default_factory=list)


class InMemoryDocumentStore(DocumentStore):
    """Process-local store for development, demos and tests.

    Mirrors the production store's limits: an `in` predicate may list at most
    `max_in_values` values.
    """

    def __init__(self, *, max_in_values: int = DEFAULT_QUERY_BATCH_LIMIT):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._watches: list[_Watch] = []
        self._max_in_values = int(max_in_values)

    def _check(self, predicates: Sequence[Predicate]) -> None:
        for p in predicates:
            if p.op == "in" and len(p.value) > self._max_in_values:
                raise StoreError(f"'in' filter supports at most {self._max_in_values} values, got {len(p.value)}")

    def _select(self, collection: str, predicates: Sequence[Predicate]) -> list[Document]:
        docs = self._collections.get(collection, {})
        return [
            Document(id=doc_id, data=dict(data))
            for doc_id, data in sorted(docs.items())
            if all(p.matches(data) for p in predicates)
        ]

    async def query(self, collection: str, predicates: Sequence[Predicate] = ()) -> list[Document]:
        self._check(predicates)
        return self._select(collection, predicates)

    async def subscribe(self, collection: str, predicates: Sequence[Predicate] = ()) -> QueueSubscription:
        self._check(predicates)

        def _unwatch() -> None:
            if watch in self._watches:
                self._watches.remove(watch)

        watch = _Watch(collection, tuple(predicates), QueueSubscription(on_close=_unwatch))
        self._watches.append(watch)
        watch.last = self._select(collection, watch.predicates)
        watch.subscription.push(watch.last)
        return watch.subscription

    async def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = True) -> None:
        self.put(collection, doc_id, fields, merge=merge)

    # Synchronous helpers (seeding, scripts, tests)

    def put(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = True) -> None:
        docs = self._collections.setdefault(collection, {})
        if merge and doc_id in docs:
            docs[doc_id] = {**docs[doc_id], **fields}
        else:
            docs[doc_id] = dict(fields)
        self._notify(collection)

    def add(self, collection: str, fields: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self.put(collection, doc_id, fields, merge=False)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        data = self._collections.get(collection, {}).get(doc_id)
        return dict(data) if data is not None else None

    def documents(self, collection: str) -> dict[str, dict[str, Any]]:
        return {doc_id: dict(data) for doc_id, data in self._collections.get(collection, {}).items()}

    @property
    def open_subscriptions(self) -> int:
        return len(self._watches)

    def _notify(self, collection: str) -> None:
        for watch in list(self._watches):
            if watch.collection != collection:
                continue
            snapshot = self._select(collection, watch.predicates)
            if snapshot != watch.last:
                watch.last = snapshot
                watch.subscription.push(snapshot)
