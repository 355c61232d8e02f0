"""
The module ``pullstream.streamer`` provides a lazy, pull-based, single-pass
sequence type, :class:`Stream`, with the familiar list-style operations.

An input data stream goes through a series of operations.
The output from one operation becomes the input to the next operation.
To fix terminology, the objects that implement the operations are called "producers".
Every producer has a single method ``pull``, which returns the next element
or the sentinel :data:`FINISHED`.
"Consumption" of the stream entails pulling at the last producer, which,
in a chain reaction, pulls each data element through the entire series of producers.
No intermediate list is ever built.


Introduction
============

>>> from pullstream.streamer import Stream
>>> data = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89]
>>> s = Stream(data).filter(lambda x: x > 10).map(lambda x: x * 10)

Adding the operators is just "setup"--nothing runs until we start to retrieve results.

>>> s.to_array()
[130, 210, 340, 550, 890]

The stream has now been consumed:

>>> s.to_array()
[]

Because a :class:`Stream` is an `Iterator`_, "retrieving the results" can also
amount to iterating over it:

>>> total = 0
>>> for x in Stream(range(5)).map(lambda x, i: x * i):
...     total += x
>>> total
30

Operators
=========

Lazy (return a new ``Stream``):
    - :meth:`~Stream.concat`
    - :meth:`~Stream.entries`
    - :meth:`~Stream.filter`
    - :meth:`~Stream.flatten`
    - :meth:`~Stream.map`
    - :meth:`~Stream.push`
    - :meth:`~Stream.slice`

Terminal, short-circuiting (stop pulling once the answer is known):
    - :meth:`~Stream.every`
    - :meth:`~Stream.find`
    - :meth:`~Stream.find_index`
    - :meth:`~Stream.includes`
    - :meth:`~Stream.index_of`
    - :meth:`~Stream.shift`
    - :meth:`~Stream.some`

Terminal, consuming the whole stream:
    - :meth:`~Stream.for_each`
    - :meth:`~Stream.join`
    - :meth:`~Stream.reduce`
    - :meth:`~Stream.to_array`
    - :meth:`~Stream.to_map`
    - :meth:`~Stream.to_object`
    - :meth:`~Stream.to_values`

Custom producers
================

Any object with a ``pull`` method that returns elements and then :data:`FINISHED`
can be the source of a ``Stream``. Subclassing :class:`Producer` is optional.

>>> from pullstream.streamer import FINISHED
>>> class Countdown:
...     def __init__(self, n):
...         self.n = n
...     def pull(self):
...         if self.n == 0:
...             return FINISHED
...         self.n -= 1
...         return self.n + 1
>>> Stream(Countdown(3)).push('liftoff').join(' ')
'3 2 1 liftoff'
"""

from ._common import FINISHED
from ._streamer import (
    Concatenator,
    Empty,
    Filter,
    Flattener,
    Mapper,
    Producer,
    Slicer,
    Stream,
    as_producer,
)

__all__ = [
    'FINISHED',
    'Concatenator',
    'Empty',
    'Filter',
    'Flattener',
    'Mapper',
    'Producer',
    'Slicer',
    'Stream',
    'as_producer',
]
