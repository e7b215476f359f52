from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, Mapping, Sequence

import mysql.connector

from ..core.constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_STORE_RETRIES, DEFAULT_STORE_TIMEOUT_SECONDS
from ..core.exceptions import StoreError
from .base import Document, DocumentStore, Predicate, QueueSubscription
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchall, normalize_json_body

logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SQL_OPERATORS = {"==": "=", ">=": ">=", "<=": "<="}


def _json_path(field_name: str) -> str:
    if not _FIELD_RE.match(field_name):
        raise StoreError(f"Unsupported field name: {field_name!r}")
    return f'$."{field_name}"'


def build_where(collection: str, predicates: Sequence[Predicate]) -> tuple[str, list[object]]:
    """Translate predicates into a WHERE clause over the JSON `body` column.

    Values are compared as JSON, so "1" and 1 stay distinct as they do in the
    in-memory store.
    """

    clauses = ["collection=%s"]
    params: list[object] = [collection]

    for p in predicates:
        path = _json_path(p.field)
        if p.op == "in":
            if not p.value:
                clauses.append("FALSE")
                continue
            alternatives = " OR ".join(["JSON_EXTRACT(body, %s) = CAST(%s AS JSON)"] * len(p.value))
            clauses.append(f"({alternatives})")
            for v in p.value:
                params.extend([path, json.dumps(v)])
        else:
            clauses.append(f"JSON_EXTRACT(body, %s) {_SQL_OPERATORS[p.op]} CAST(%s AS JSON)")
            params.extend([path, json.dumps(p.value)])

    return " AND ".join(clauses), params


class MySQLDocumentStore(DocumentStore):
    """Document store on a single MySQL table (see database/schema.sql).

    Blocking connector calls run on worker threads with a per-call timeout
    and a bounded number of retries. Subscriptions poll and deliver a new
    snapshot whenever the result set changes.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        retries: int = DEFAULT_STORE_RETRIES,
    ):
        self._conn_factory = conn_factory
        self._poll_interval = float(poll_interval)
        self._timeout = float(timeout)
        self._retries = int(retries)

    async def query(self, collection: str, predicates: Sequence[Predicate] = ()) -> list[Document]:
        return await self._call(self._query_sync, collection, tuple(predicates))

    async def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = True) -> None:
        await self._call(self._upsert_sync, collection, str(doc_id), dict(fields), merge)

    async def subscribe(self, collection: str, predicates: Sequence[Predicate] = ()) -> QueueSubscription:
        predicates = tuple(predicates)
        initial = await self.query(collection, predicates)

        subscription: QueueSubscription = QueueSubscription(on_close=lambda: poller.cancel())
        subscription.push(initial)
        poller = asyncio.create_task(self._poll(subscription, collection, predicates, initial))
        return subscription

    async def _poll(
        self,
        subscription: QueueSubscription,
        collection: str,
        predicates: tuple[Predicate, ...],
        last: list[Document],
    ) -> None:
        while not subscription.closed:
            await asyncio.sleep(self._poll_interval)
            try:
                snapshot = await self.query(collection, predicates)
            except StoreError as exc:
                logger.warning("Polling %s stopped: %s", collection, exc)
                subscription.fail(exc)
                return
            if snapshot != last:
                last = snapshot
                subscription.push(snapshot)

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)
            except (mysql.connector.Error, asyncio.TimeoutError) as exc:
                attempt += 1
                if attempt > self._retries:
                    raise StoreError(f"{fn.__name__} failed after {attempt} attempt(s): {exc}") from exc
                logger.warning("%s failed (attempt %d/%d): %s", fn.__name__, attempt, self._retries + 1, exc)
                await asyncio.sleep(min(0.2 * attempt, 1.0))
            except (TypeError, ValueError) as exc:
                raise StoreError(f"{fn.__name__} returned malformed data: {exc}") from exc

    def _query_sync(self, collection: str, predicates: tuple[Predicate, ...]) -> list[Document]:
        where, params = build_where(collection, predicates)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT doc_id, body
                FROM documents
                WHERE {where}
                ORDER BY doc_id
                """,
                tuple(params),
            )
            rows = fetchall(cur)
        return [Document(id=str(r["doc_id"]), data=normalize_json_body(r["body"])) for r in rows]

    def _upsert_sync(self, collection: str, doc_id: str, fields: dict[str, Any], merge: bool) -> None:
        body = json.dumps(fields, ensure_ascii=False, default=str)
        on_duplicate = "JSON_MERGE_PATCH(body, VALUES(body))" if merge else "VALUES(body)"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO documents(collection, doc_id, body)
                VALUES(%s,%s,CAST(%s AS JSON))
                ON DUPLICATE KEY UPDATE body={on_duplicate}
                """,
                (collection, doc_id, body),
            )
