# Producers and the pull chain
#
# A producer has a single method `pull`, which returns the next element
# or the sentinel `FINISHED`. Every operator below wraps one or two
# upstream producers and is itself a producer, so they chain:
#
#   Mapper(Filter(IterSource(iter(data)), pred), func)
#
# Pulling on the outermost producer pulls, in a chain reaction,
# one element at a time through every operator down to the source.
# Nothing is buffered beyond the element in hand.
#
# A `Stream` is a thin facade around one producer. Its operator methods
# build a new producer on top of the current one and return a new `Stream`;
# they do not modify `self`.

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any, Optional, TypeVar

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

logger = logging.getLogger(__name__)


T = TypeVar('T')  # indicates input data element
TT = TypeVar('TT')  # indicates output after an op on `T`
Elem = TypeVar('Elem')


class Producer(ABC):
    @abstractmethod
    def pull(self):
        """
        Return the next element, or ``FINISHED`` if there are no more.

        Once ``FINISHED`` has been returned, all subsequent calls
        return ``FINISHED`` as well.
        """
        raise NotImplementedError


class Empty(Producer):
    def pull(self):
        return FINISHED


class IterSource(Producer):
    def __init__(self, instream: Iterator, /):
        self._instream = instream
        self._finished = False

    def pull(self):
        if self._finished:
            return FINISHED
        x = next(self._instream, FINISHED)
        if x is FINISHED:
            self._finished = True
        return x


class PullSource(Producer):
    """
    Adapts a user object that has a ``pull`` method but does not
    subclass :class:`Producer`.
    """

    def __init__(self, instream, /):
        self._instream = instream
        self._finished = False

    def pull(self):
        if self._finished:
            return FINISHED
        x = self._instream.pull()
        if inspect.isawaitable(x):
            if inspect.iscoroutine(x):
                x.close()
            raise TypeError(
                f"`pull` of {type(self._instream).__name__!r} returned an awaitable; "
                "use `AsyncStream` for async sources"
            )
        if x is FINISHED:
            self._finished = True
        return x


def as_producer(source) -> Producer:
    """
    Get a :class:`Producer` out of a :class:`Stream`, a :class:`Producer`,
    an object with a ``pull`` method, or an `Iterable`_.
    """
    if isinstance(source, Stream):
        return source._producer
    if isinstance(source, Producer):
        return source
    pull = getattr(source, 'pull', None)
    if callable(pull):
        if inspect.iscoroutinefunction(pull):
            raise TypeError(
                f"can not pull synchronously from object of type {type(source).__name__!r}; "
                "use `AsyncStream` for async sources"
            )
        return PullSource(source)
    try:
        it = iter(source)
    except TypeError:
        raise TypeError(
            f"can not figure out how to pull from object of type {type(source).__name__!r}"
        ) from None
    return IterSource(it)


class Filter(Producer):
    def __init__(
        self,
        instream: Producer,
        func: Callable[[T, int, Any], bool],
        context: Any = None,
    ):
        self._instream = instream
        self.func = bind_callback(func, 3)
        self.context = context
        self.index = 0
        # Counts upstream elements seen, matched or not.

    def pull(self):
        instream = self._instream
        func = self.func
        context = self.context
        while True:
            x = instream.pull()
            if x is FINISHED:
                return x
            i = self.index
            self.index = i + 1
            if func(x, i, context):
                return x


class Mapper(Producer):
    def __init__(
        self,
        instream: Producer,
        func: Callable[[T, int, Any], TT],
        context: Any = None,
    ):
        self._instream = instream
        self.func = bind_callback(func, 3)
        self.context = context
        self.index = 0

    def pull(self):
        x = self._instream.pull()
        if x is FINISHED:
            return x
        i = self.index
        self.index = i + 1
        return self.func(x, i, self.context)


class Concatenator(Producer):
    """
    See :meth:`Stream.concat`.

    Chained concatenations, like ``s.push(a).push(b).push(c)``, are not pulled
    through one another. On the first pull, the tree of
    concatenators that have not started yet is unrolled into a queue of
    its leaf producers, which are then pulled in order.
    """

    def __init__(self, first: Producer, second: Producer):
        self._first = first
        self._second = second
        self._queue = None

    def _unroll(self) -> deque:
        queue = deque()
        todo = [self._second, self._first]
        while todo:
            p = todo.pop()
            if isinstance(p, Concatenator) and p._queue is None:
                todo.append(p._second)
                todo.append(p._first)
            else:
                queue.append(p)
        return queue

    def pull(self):
        if self._queue is None:
            self._queue = self._unroll()
        queue = self._queue
        while queue:
            x = queue[0].pull()
            if x is not FINISHED:
                return x
            queue.popleft()
            logger.debug('concatenated stream finished; %d remaining', len(queue))
        return FINISHED


class Flattener(Producer):
    """
    See :meth:`Stream.flatten`.
    """

    def __init__(
        self,
        instream: Producer,
        accessor: Optional[Callable[[T, int, Any], Any]] = None,
        context: Any = None,
    ):
        if accessor is not None:
            instream = Mapper(instream, accessor, context)
        # The outer stream yields ready-to-pull inner producers.
        self._outer = Mapper(instream, as_producer)
        self._inner = None

    def pull(self):
        while True:
            if self._inner is None:
                inner = self._outer.pull()
                if inner is FINISHED:
                    return inner
                self._inner = inner
            x = self._inner.pull()
            if x is not FINISHED:
                return x
            # Inner stream exhausted (or empty); move on to the next one.
            self._inner = None


class Slicer(Producer):
    def __init__(self, instream: Producer, begin: int = 0, end: Optional[int] = None):
        self._instream = instream
        self.begin = begin
        self.end = end
        self.index = 0

    def pull(self):
        begin = self.begin
        end = self.end
        while end is None or self.index < end:
            x = self._instream.pull()
            if x is FINISHED:
                return x
            i = self.index
            self.index = i + 1
            if i >= begin:
                return x
        return FINISHED


class Stream(Iterator[Elem]):
    """
    The class ``Stream`` is the "entry-point" for the sync stream utilities.
    User constructs a ``Stream`` object by passing an `Iterable`_ (or a producer)
    to it, then calls its methods to use it.

    The operator methods, such as :meth:`map`, :meth:`filter`, :meth:`concat`,
    :meth:`flatten`, :meth:`slice`, are lazy. Each returns a *new* ``Stream``
    on top of the current one, facilitating calls in a "chained" fashion::

        s = Stream(data).filter(...).map(...).slice(2, 10)

    Nothing happens until elements are requested, either by iterating
    over the stream, or by one of the "terminal" methods such as
    :meth:`to_array`, :meth:`reduce`, :meth:`find`.
    Elements are pulled through the chain one at a time.

    A stream is single-pass. Once consumed, it is gone.
    Consuming the original stream object as well as a stream derived from it
    interleaves pulls on the same source and is not supported.

    Callbacks to the operators receive ``(value, index, context)``
    (reducers receive ``(accumulator, value, index, context)``),
    where ``index`` is the zero-based position of the element in the stream
    the operator is applied to, and ``context`` is the value passed to the operator.
    A callback that declares fewer required positional parameters gets fewer
    arguments, so ``lambda x: x > 10`` is fine.

    >>> data = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89]
    >>> Stream(data).filter(lambda x: x > 10).map(lambda x: x * 10).to_array()
    [130, 210, 340, 550, 890]
    """

    def __init__(self, instream, /):
        """
        Parameters
        ----------
        instream
            The input stream of elements, possibly unlimited.
            This is a ``Stream``, a :class:`Producer`,
            any object with a ``pull`` method following the producer
            protocol, or an `Iterable`_.
            Anything else raises ``TypeError``.
        """
        self._producer = as_producer(instream)

    @classmethod
    def of(cls, *values) -> Self:
        """
        Create a stream of the arguments.

        >>> Stream.of(1, 'a', None).to_array()
        [1, 'a', None]
        """
        return cls(values)

    @classmethod
    def from_object(cls, obj) -> Self:
        """
        Create a stream of the ``(key, value)`` pairs of a mapping,
        or of the instance attributes of a plain object.

        >>> Stream.from_object({'a': 1, 'b': 2}).to_array()
        [('a', 1), ('b', 2)]
        """
        return cls(object_items(obj))

    @classmethod
    def empty(cls) -> Self:
        return cls(Empty())

    def __iter__(self) -> Iterator[Elem]:
        return self

    def __next__(self) -> Elem:
        x = self._producer.pull()
        if x is FINISHED:
            raise StopIteration
        return x

    def pull(self):
        """
        Return the next element or ``FINISHED``.
        """
        return self._producer.pull()

    def to_async(self):
        """
        Return an :class:`~pullstream.async_streamer.AsyncStream` that pulls
        from this stream.
        """
        from ._async_streamer import AsyncStream

        return AsyncStream(self)

    # Lazy operators.

    def concat(self, other) -> Self:
        """
        Return a stream of the elements of this stream followed by the elements of ``other``.

        ``other`` is anything that can be passed to the ``Stream`` constructor.

        >>> Stream([1, 2]).concat([3]).concat(Stream([4, 5])).to_array()
        [1, 2, 3, 4, 5]
        """
        return type(self)(Concatenator(self._producer, as_producer(other)))

    def entries(self) -> Self:
        """
        Return a stream of ``(index, value)`` tuples.

        >>> Stream('ab').entries().to_array()
        [(0, 'a'), (1, 'b')]
        """
        return self.map(lambda x, i: (i, x))

    def filter(self, func: Callable[[T, int, Any], bool], context: Any = None) -> Self:
        """
        Select data elements to keep in the stream according to the predicate ``func``.

        Pulling from the new stream skips over any number of non-matching
        upstream elements (in a loop, not by recursion).

        Parameters
        ----------
        func
            Called with ``(value, index, context)`` where ``index`` is
            the position of ``value`` in this stream (counting elements
            that are dropped). Returns true to keep the element.
        context
            Passed to ``func`` unchanged.
        """
        return type(self)(Filter(self._producer, func, context))

    def flatten(
        self,
        accessor: Optional[Callable[[T, int, Any], Any]] = None,
        context: Any = None,
    ) -> Self:
        """
        Turn a stream of streams into a stream of individual elements,
        removing one level of nesting.

        Parameters
        ----------
        accessor
            Called with ``(value, index, context)`` on each element
            to get the inner stream, which is anything that can be
            passed to the ``Stream`` constructor.
            If ``None``, each element itself is the inner stream.
        context
            Passed to ``accessor`` unchanged.

        Empty inner streams are skipped:

        >>> Stream([[1, 2], [], [3]]).flatten().to_array()
        [1, 2, 3]
        >>> Stream([{'v': 'ab'}, {'v': ''}, {'v': 'c'}]).flatten(lambda x: x['v']).to_array()
        ['a', 'b', 'c']
        """
        return type(self)(Flattener(self._producer, accessor, context))

    def map(self, func: Callable[[T, int, Any], TT], context: Any = None) -> Self:
        """
        Perform a simple transformation on each data element.

        This is a 1-to-1 transform; ``func`` is called exactly once per element,
        with ``(value, index, context)``.

        If the logic needs to keep some state or history info, then define a class and implement
        its ``__call__`` method.
        """
        return type(self)(Mapper(self._producer, func, context))

    def push(self, *items) -> Self:
        """
        Return a stream of the elements of this stream followed by ``items``.

        ``items`` are taken as they are. No conversion is attempted.

        >>> Stream([1, 2]).push('3', 4).to_array()
        [1, 2, '3', 4]
        """
        return self.concat(type(self).of(*items))

    def slice(self, begin: int = 0, end: Optional[int] = None) -> Self:
        """
        Keep the elements whose index is in ``[begin, end)``.

        Unlike ``filter``, this stops pulling from upstream once
        ``end`` elements have been seen, hence works on unlimited streams.

        Raises ``ValueError`` if ``begin`` or ``end`` is negative.

        >>> Stream(range(10)).slice(2, 5).to_array()
        [2, 3, 4]
        >>> Stream(range(10)).slice(8).to_array()
        [8, 9]
        """
        if begin < 0:
            raise ValueError(f"`begin` must be >= 0; got {begin}")
        if end is not None and end < 0:
            raise ValueError(f"`end` must be >= 0; got {end}")
        return type(self)(Slicer(self._producer, begin, end))

    # Terminal operators.

    def every(self, func: Callable[[T, int, Any], bool], context: Any = None) -> bool:
        """
        Return ``True`` if ``func`` returns true for every element.
        Stops at the first element for which it does not.
        """
        func = bind_callback(func, 3)
        for i, x in enumerate(self):
            if not func(x, i, context):
                return False
        return True

    def some(self, func: Callable[[T, int, Any], bool], context: Any = None) -> bool:
        """
        Return ``True`` if ``func`` returns true for any element.
        Stops at the first element for which it does.
        """
        return self.find_index(func, context) >= 0

    def find(
        self,
        func: Callable[[T, int, Any], bool],
        context: Any = None,
        *,
        default: Any = None,
    ):
        """
        Return the first element for which ``func`` returns true,
        or ``default`` if there is none.
        """
        func = bind_callback(func, 3)
        for i, x in enumerate(self):
            if func(x, i, context):
                return x
        return default

    def find_index(self, func: Callable[[T, int, Any], bool], context: Any = None) -> int:
        """
        Return the index of the first element for which ``func`` returns true,
        or -1 if there is none.
        """
        func = bind_callback(func, 3)
        for i, x in enumerate(self):
            if func(x, i, context):
                return i
        return -1

    def for_each(self, func: Callable[[T, int, Any], Any], context: Any = None) -> None:
        """
        Call ``func`` on every element. ``func`` may also take no argument at all.
        """
        func = bind_callback(func, 3, min_nargs=0)
        for i, x in enumerate(self):
            func(x, i, context)

    def includes(self, item, from_index: int = 0) -> bool:
        """
        Return ``True`` if ``item`` is found at or after ``from_index``.

        Elements are compared the way ``list`` does it: by identity, then equality.
        Hence values that are equal but of different types match each other:

        >>> Stream([True]).includes(1)
        True
        >>> Stream([1.0]).index_of(1)
        0
        """
        return self.slice(from_index).some(lambda x: same(x, item))

    def index_of(self, item, from_index: int = 0) -> int:
        """
        Return the index of the first occurrence of ``item`` at or after ``from_index``,
        or -1 if not found.

        >>> Stream([1, 2, 3, 2]).index_of(2, 2)
        3
        """
        k = self.slice(from_index).find_index(lambda x: same(x, item))
        if k < 0:
            return -1
        return k + from_index

    def join(self, separator: str = ',') -> str:
        """
        Join the ``str`` of the elements with ``separator``.

        >>> Stream([]).join(',')
        ''
        >>> Stream([1, 2, 3]).join('-')
        '1-2-3'
        """
        return separator.join(str(x) for x in self)

    def reduce(
        self,
        func: Callable[[Any, T, int, Any], Any],
        initial: Any = NOTSET,
        context: Any = None,
    ):
        """
        Reduce the stream to a single value by calling
        ``func(accumulator, value, index, context)`` on every element.

        If ``initial`` is not provided, the first element is used as the initial
        accumulator, and accumulation begins with the second element.
        In that case an empty stream raises ``TypeError``.

        >>> Stream(range(5)).reduce(lambda z, x: z + x, 10)
        20
        """
        func = bind_callback(func, 4, min_nargs=2)
        z = initial
        start = 0
        if z is NOTSET:
            z = self._producer.pull()
            if z is FINISHED:
                raise TypeError('reduce() of empty stream with no initial value')
            start = 1
        for i, x in enumerate(self, start):
            z = func(z, x, i, context)
        return z

    def shift(self, default: Any = None):
        """
        Take off and return the first element, or ``default`` if the stream is empty.
        The stream continues from the following element.
        """
        x = self._producer.pull()
        if x is FINISHED:
            return default
        return x

    def to_array(self) -> list[Elem]:
        """
        Return all the elements in a list.

        .. warning:: Do not call this method on "big data".
        """
        return list(self)

    collect = to_array

    def to_map(
        self,
        key: Optional[Callable[[T], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
    ) -> dict:
        """
        Return a ``dict`` built from the elements.

        By default the elements are taken to be ``(key, value)`` pairs.

        >>> Stream([('a', 1), ('b', 2)]).to_map()
        {'a': 1, 'b': 2}
        >>> Stream([{'name': 'peter', 'grade': 'A'}]).to_map(lambda e: e['name'], lambda e: e['grade'])
        {'peter': 'A'}
        """
        key = key or first_of_pair
        value = value or second_of_pair
        return {key(x): value(x) for x in self}

    def to_object(
        self,
        key: Optional[Callable[[T], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
    ) -> dict[str, Any]:
        """
        Like :meth:`to_map`, but the keys are converted to ``str``.

        >>> Stream([(1, 'x'), (2, 'y')]).to_object()
        {'1': 'x', '2': 'y'}
        """
        key = key or first_of_pair
        value = value or second_of_pair
        return {str(key(x)): value(x) for x in self}

    def to_values(self) -> list:
        """
        Return the second member of every element, which is a ``(key, value)`` pair.
        """
        return self.map(second_of_pair).to_array()
