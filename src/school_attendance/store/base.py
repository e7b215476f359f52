from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, Optional, Protocol, Sequence, TypeVar

from ..core.exceptions import StoreError, SubscriptionError

T = TypeVar("T")
U = TypeVar("U")

OPERATORS = ("==", "in", ">=", "<=")

_CLOSED = object()


@dataclass(frozen=True)
class Document:
    id: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Predicate:
    """A single field condition understood by every store backend."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise StoreError(f"Unsupported operator: {self.op!r}")
        if self.op == "in":
            object.__setattr__(self, "value", tuple(self.value))

    @classmethod
    def eq(cls, field_name: str, value: Any) -> "Predicate":
        return cls(field_name, "==", value)

    @classmethod
    def is_in(cls, field_name: str, values: Sequence[Any]) -> "Predicate":
        return cls(field_name, "in", tuple(values))

    @classmethod
    def gte(cls, field_name: str, value: Any) -> "Predicate":
        return cls(field_name, ">=", value)

    @classmethod
    def lte(cls, field_name: str, value: Any) -> "Predicate":
        return cls(field_name, "<=", value)

    def matches(self, data: Mapping[str, Any]) -> bool:
        if self.field not in data:
            return False
        actual = data[self.field]
        if self.op == "==":
            return actual == self.value
        if self.op == "in":
            return actual in self.value
        try:
            if self.op == ">=":
                return actual >= self.value
            return actual <= self.value
        except TypeError:
            return False


class Subscription(Protocol[T]):
    """Async iterator of full snapshots; nothing is delivered after close()."""

    @property
    def closed(self) -> bool:
        raise NotImplementedError

    def __aiter__(self) -> "Subscription[T]":
        raise NotImplementedError

    async def __anext__(self) -> T:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class QueueSubscription(Generic[T]):
    """Channel backing one subscription.

    The store side calls push()/fail(); the consumer iterates. Items still
    queued when close() is called are dropped.
    """

    def __init__(self, *, on_close: Optional[Callable[[], Any]] = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, snapshot: T) -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(snapshot)
        return True

    def fail(self, exc: Exception) -> None:
        if self._closed:
            return
        if not isinstance(exc, SubscriptionError):
            wrapped = SubscriptionError(str(exc))
            wrapped.__cause__ = exc
            exc = wrapped
        self._queue.put_nowait(exc)

    def __aiter__(self) -> "QueueSubscription[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise StopAsyncIteration
        if isinstance(item, SubscriptionError):
            raise item
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            result = self._on_close()
            if inspect.isawaitable(result):
                await result


class MappedSubscription(Generic[T, U]):
    """Applies `fn` to every snapshot of an inner subscription."""

    def __init__(self, inner: Subscription[T], fn: Callable[[T], U]):
        self._inner = inner
        self._fn = fn

    @property
    def closed(self) -> bool:
        return self._inner.closed

    def __aiter__(self) -> "MappedSubscription[T, U]":
        return self

    async def __anext__(self) -> U:
        return self._fn(await self._inner.__anext__())

    async def close(self) -> None:
        await self._inner.close()


class DocumentStore(Protocol):
    """Generic document store the engine runs against.

    Note (DIP): services depend on this interface, never on a concrete backend.
    """

    async def query(self, collection: str, predicates: Sequence[Predicate] = ()) -> list[Document]:
        raise NotImplementedError

    async def subscribe(self, collection: str, predicates: Sequence[Predicate] = ()) -> Subscription[list[Document]]:
        """Deliver the current result set now and again after every change."""

        raise NotImplementedError

    async def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = True) -> None:
        """Create or update a document.

        With merge=True, fields not included are preserved.
        """

        raise NotImplementedError
