"""
The package ``pullstream`` provides lazy, pull-based streams with list-style
operations (``map``, ``filter``, ``concat``, ``flatten``, ``slice``, ``reduce``,
``to_array``, ...), which never build intermediate lists.

1. :class:`pullstream.streamer.Stream` for in-memory or otherwise immediately
   available data.
2. :class:`pullstream.async_streamer.AsyncStream` for sources whose next element
   has to be awaited.

To install, do

::

   python3 -m pip install pullstream
"""

__version__ = '0.3.0'


from . import async_streamer, streamer
from ._common import FINISHED
from ._logging import config_logger
from .async_streamer import AsyncProducer, AsyncStream
from .streamer import Producer, Stream

__all__ = [
    'FINISHED',
    'AsyncProducer',
    'AsyncStream',
    'Producer',
    'Stream',
    'config_logger',
]
