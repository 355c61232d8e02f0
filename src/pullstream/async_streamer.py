"""
Async counterpart of :mod:`pullstream.streamer`.

The target use case is a source whose next element takes time to arrive,
e.g. it comes over the network or from a timer.
:class:`AsyncStream` has the same operators as :class:`~pullstream.streamer.Stream`.
The lazy operators are regular methods; the terminal operators are coroutines.

In a typical use, one starts with an ``AsyncStream`` object and calls its methods
in a "chained" fashion::

    pipeline = AsyncStream(source).filter(is_good).map(enrich)

Then use ``pipeline`` in one of the following ways::

    async for elem in pipeline:
        ...

    result = await pipeline.to_array()

    await pipeline.for_each(save)

Pulls are strictly sequential: a producer never sees a new pull before
its previous pull has completed. A stream must have a single consumer.
"""

from ._async_streamer import (
    AsyncConcatenator,
    AsyncEmpty,
    AsyncFilter,
    AsyncFlattener,
    AsyncMapper,
    AsyncProducer,
    AsyncSlicer,
    AsyncStream,
    as_async_producer,
)
from ._common import FINISHED

__all__ = [
    'FINISHED',
    'AsyncConcatenator',
    'AsyncEmpty',
    'AsyncFilter',
    'AsyncFlattener',
    'AsyncMapper',
    'AsyncProducer',
    'AsyncSlicer',
    'AsyncStream',
    'as_async_producer',
]
