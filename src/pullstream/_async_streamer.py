# Async counterpart of `_streamer`.
#
# Every `pull` is a coroutine. An operator awaits its upstream's `pull`
# before producing its own result, so the (N+1)-th pull on a producer
# is never issued before the N-th has completed, as long as the consumer
# awaits one pull at a time.

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, Optional, TypeVar

import asyncstdlib
from typing_extensions import Self  # In 3.11, import this from `typing`

from ._common import (
    FINISHED,
    NOTSET,
    bind_callback,
    first_of_pair,
    object_items,
    same,
    second_of_pair,
)
from ._streamer import Producer, Stream

logger = logging.getLogger(__name__)


T = TypeVar('T')  # indicates input data element
TT = TypeVar('TT')  # indicates output after an op on `T`
Elem = TypeVar('Elem')


class AsyncProducer(ABC):
    @abstractmethod
    async def pull(self):
        """
        Return the next element, or ``FINISHED`` if there are no more.

        Once ``FINISHED`` has been returned, all subsequent calls
        return ``FINISHED`` as well.
        """
        raise NotImplementedError


class AsyncEmpty(AsyncProducer):
    async def pull(self):
        return FINISHED


class AsyncIterSource(AsyncProducer):
    def __init__(self, instream: Iterable | AsyncIterable, /):
        # Sync iterables are wrapped in an async iterator.
        self._instream = asyncstdlib.iter(instream)
        self._finished = False

    async def pull(self):
        if self._finished:
            return FINISHED
        x = await asyncstdlib.anext(self._instream, FINISHED)
        if x is FINISHED:
            self._finished = True
        return x


class AsyncPullSource(AsyncProducer):
    """
    Adapts a user object that has a ``pull`` method, sync or async,
    but does not subclass :class:`AsyncProducer`.
    """

    def __init__(self, instream, /):
        self._instream = instream
        self._finished = False

    async def pull(self):
        if self._finished:
            return FINISHED
        x = self._instream.pull()
        if inspect.isawaitable(x):
            x = await x
        if x is FINISHED:
            self._finished = True
        return x


class SyncSource(AsyncProducer):
    def __init__(self, instream: Producer, /):
        self._instream = instream

    async def pull(self):
        return self._instream.pull()


def as_async_producer(source) -> AsyncProducer:
    """
    Get an :class:`AsyncProducer` out of an :class:`AsyncStream`, an :class:`AsyncProducer`,
    a sync :class:`~pullstream.streamer.Stream` or :class:`~pullstream.streamer.Producer`,
    an object with a ``pull`` method, or an `Iterable`_ or `AsyncIterable`_.
    """
    if isinstance(source, AsyncStream):
        return source._producer
    if isinstance(source, AsyncProducer):
        return source
    if isinstance(source, Stream):
        return SyncSource(source._producer)
    if isinstance(source, Producer):
        return SyncSource(source)
    if callable(getattr(source, 'pull', None)):
        return AsyncPullSource(source)
    if not isinstance(source, (Iterable, AsyncIterable)):
        raise TypeError(
            f"can not figure out how to pull from object of type {type(source).__name__!r}"
        )
    logger.debug('wrapping %r for async pulls', type(source).__name__)
    return AsyncIterSource(source)


class AsyncFilter(AsyncProducer):
    def __init__(
        self,
        instream: AsyncProducer,
        func: Callable[[T, int, Any], bool] | Callable[[T, int, Any], Awaitable[bool]],
        context: Any = None,
    ):
        self._instream = instream
        self.func = bind_callback(func, 3)
        self.context = context
        self.index = 0

    async def pull(self):
        instream = self._instream
        func = self.func
        context = self.context
        while True:
            x = await instream.pull()
            if x is FINISHED:
                return x
            i = self.index
            self.index = i + 1
            z = func(x, i, context)
            if inspect.isawaitable(z):
                z = await z
            if z:
                return x


class AsyncMapper(AsyncProducer):
    def __init__(
        self,
        instream: AsyncProducer,
        func: Callable[[T, int, Any], Any] | Callable[[T, int, Any], Awaitable[Any]],
        context: Any = None,
    ):
        self._instream = instream
        self.func = bind_callback(func, 3)
        self.context = context
        self.index = 0

    async def pull(self):
        x = await self._instream.pull()
        if x is FINISHED:
            return x
        i = self.index
        self.index = i + 1
        z = self.func(x, i, self.context)
        if inspect.isawaitable(z):
            z = await z
        return z


class AsyncConcatenator(AsyncProducer):
    """
    See :meth:`AsyncStream.concat`.

    Chained concatenations, like ``s.push(a).push(b).push(c)``, are not pulled
    through one another. On the first pull, the tree of
    concatenators that have not started yet is unrolled into a queue of
    its leaf producers, which are then pulled in order.
    """

    def __init__(self, first: AsyncProducer, second: AsyncProducer):
        self._first = first
        self._second = second
        self._queue = None

    def _unroll(self) -> deque:
        queue = deque()
        todo = [self._second, self._first]
        while todo:
            p = todo.pop()
            if isinstance(p, AsyncConcatenator) and p._queue is None:
                todo.append(p._second)
                todo.append(p._first)
            else:
                queue.append(p)
        return queue

    async def pull(self):
        if self._queue is None:
            self._queue = self._unroll()
        queue = self._queue
        while queue:
            x = await queue[0].pull()
            if x is not FINISHED:
                return x
            queue.popleft()
            logger.debug('concatenated stream finished; %d remaining', len(queue))
        return FINISHED


class AsyncFlattener(AsyncProducer):
    def __init__(
        self,
        instream: AsyncProducer,
        accessor: Optional[Callable[[T, int, Any], Any]] = None,
        context: Any = None,
    ):
        if accessor is not None:
            instream = AsyncMapper(instream, accessor, context)
        self._outer = AsyncMapper(instream, as_async_producer)
        self._inner = None

    async def pull(self):
        while True:
            if self._inner is None:
                inner = await self._outer.pull()
                if inner is FINISHED:
                    return inner
                self._inner = inner
            x = await self._inner.pull()
            if x is not FINISHED:
                return x
            self._inner = None


class AsyncSlicer(AsyncProducer):
    def __init__(
        self, instream: AsyncProducer, begin: int = 0, end: Optional[int] = None
    ):
        self._instream = instream
        self.begin = begin
        self.end = end
        self.index = 0

    async def pull(self):
        begin = self.begin
        end = self.end
        while end is None or self.index < end:
            x = await self._instream.pull()
            if x is FINISHED:
                return x
            i = self.index
            self.index = i + 1
            if i >= begin:
                return x
        return FINISHED


async def _call(func, *args):
    z = func(*args)
    if inspect.isawaitable(z):
        z = await z
    return z


class AsyncStream(AsyncIterator[Elem]):
    """
    Async counterpart of :class:`~pullstream.streamer.Stream`.

    The operators have the same names and semantics. The lazy operators
    (:meth:`map`, :meth:`filter`, etc.) are regular methods returning a new
    ``AsyncStream``; the terminal operators (:meth:`to_array`, :meth:`reduce`, etc.)
    are coroutines.

    The input may be an async or sync iterable, or a producer whose ``pull``
    is sync or async. Callbacks may be sync or async functions.
    """

    def __init__(self, instream, /):
        self._producer = as_async_producer(instream)

    @classmethod
    def of(cls, *values) -> Self:
        return cls(values)

    @classmethod
    def from_object(cls, obj) -> Self:
        return cls(object_items(obj))

    @classmethod
    def empty(cls) -> Self:
        return cls(AsyncEmpty())

    def __aiter__(self) -> AsyncIterator[Elem]:
        return self

    async def __anext__(self) -> Elem:
        x = await self._producer.pull()
        if x is FINISHED:
            raise StopAsyncIteration
        return x

    async def pull(self):
        return await self._producer.pull()

    # Lazy operators.

    def concat(self, other) -> Self:
        return type(self)(AsyncConcatenator(self._producer, as_async_producer(other)))

    def entries(self) -> Self:
        return self.map(lambda x, i: (i, x))

    def filter(self, func: Callable[[T, int, Any], bool], context: Any = None) -> Self:
        return type(self)(AsyncFilter(self._producer, func, context))

    def flatten(
        self,
        accessor: Optional[Callable[[T, int, Any], Any]] = None,
        context: Any = None,
    ) -> Self:
        """
        Inner streams may be anything accepted by the ``AsyncStream`` constructor,
        including sync iterables.
        """
        return type(self)(AsyncFlattener(self._producer, accessor, context))

    def map(self, func: Callable[[T, int, Any], TT], context: Any = None) -> Self:
        return type(self)(AsyncMapper(self._producer, func, context))

    def push(self, *items) -> Self:
        return self.concat(type(self).of(*items))

    def slice(self, begin: int = 0, end: Optional[int] = None) -> Self:
        if begin < 0:
            raise ValueError(f"`begin` must be >= 0; got {begin}")
        if end is not None and end < 0:
            raise ValueError(f"`end` must be >= 0; got {end}")
        return type(self)(AsyncSlicer(self._producer, begin, end))

    # Terminal operators.

    async def every(
        self, func: Callable[[T, int, Any], bool], context: Any = None
    ) -> bool:
        func = bind_callback(func, 3)
        i = 0
        async for x in self:
            if not await _call(func, x, i, context):
                return False
            i += 1
        return True

    async def some(
        self, func: Callable[[T, int, Any], bool], context: Any = None
    ) -> bool:
        return await self.find_index(func, context) >= 0

    async def find(
        self,
        func: Callable[[T, int, Any], bool],
        context: Any = None,
        *,
        default: Any = None,
    ):
        func = bind_callback(func, 3)
        i = 0
        async for x in self:
            if await _call(func, x, i, context):
                return x
            i += 1
        return default

    async def find_index(
        self, func: Callable[[T, int, Any], bool], context: Any = None
    ) -> int:
        func = bind_callback(func, 3)
        i = 0
        async for x in self:
            if await _call(func, x, i, context):
                return i
            i += 1
        return -1

    async def for_each(
        self, func: Callable[[T, int, Any], Any], context: Any = None
    ) -> None:
        func = bind_callback(func, 3, min_nargs=0)
        i = 0
        async for x in self:
            await _call(func, x, i, context)
            i += 1

    async def includes(self, item, from_index: int = 0) -> bool:
        return await self.slice(from_index).some(lambda x: same(x, item))

    async def index_of(self, item, from_index: int = 0) -> int:
        k = await self.slice(from_index).find_index(lambda x: same(x, item))
        if k < 0:
            return -1
        return k + from_index

    async def join(self, separator: str = ',') -> str:
        return separator.join([str(x) async for x in self])

    async def reduce(
        self,
        func: Callable[[Any, T, int, Any], Any],
        initial: Any = NOTSET,
        context: Any = None,
    ):
        func = bind_callback(func, 4, min_nargs=2)
        z = initial
        i = 0
        if z is NOTSET:
            z = await self._producer.pull()
            if z is FINISHED:
                raise TypeError('reduce() of empty stream with no initial value')
            i = 1
        async for x in self:
            z = await _call(func, z, x, i, context)
            i += 1
        return z

    async def shift(self, default: Any = None):
        x = await self._producer.pull()
        if x is FINISHED:
            return default
        return x

    async def to_array(self) -> list[Elem]:
        return await asyncstdlib.list(self)

    collect = to_array

    async def to_map(
        self,
        key: Optional[Callable[[T], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
    ) -> dict:
        key = key or first_of_pair
        value = value or second_of_pair
        return {key(x): value(x) async for x in self}

    async def to_object(
        self,
        key: Optional[Callable[[T], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
    ) -> dict[str, Any]:
        key = key or first_of_pair
        value = value or second_of_pair
        return {str(key(x)): value(x) async for x in self}

    async def to_values(self) -> list:
        return await self.map(second_of_pair).to_array()
