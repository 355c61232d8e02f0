"""
Configure logging, mainly the format.

A call to the function ``config_logger`` in a launching script is all that is needed to set up the logging format.
Usually the 'level' argument is the only argument one needs to customize::

  config_logger(level='debug')

If `level` is not specified, environment variable `LOGLEVEL` is used;
if that is not set, a default level (currently 'info') is used.

Do not call this in library modules.
Library modules should have ::

   logger = logging.getLogger(__name__)

and then just use ``logger`` to write logs without concern about formatting,
destination of the log message, etc.

The modules of this package log at the DEBUG level only.
"""
import logging
import os
import time
import warnings
from datetime import datetime, timezone as _timezone
from typing import Optional, Union

import pytz


def log_level_to_str(level: int) -> str:
    '''
    `level`: `logging.DEBUG`, `logging.INFO`, etc.
    '''
    return logging.getLevelName(level)
    # Return uppercase 'DEBUG', 'INFO', etc.


def log_level_from_str(level: str) -> int:
    '''
    `level`: 'debug', 'info', etc.
    '''
    z = getattr(logging, level.upper(), None)
    if not isinstance(z, int):
        raise ValueError(f"unknown log level {level!r}")
    return z


def _make_converter(timezone: str):
    if timezone.upper() == 'UTC':
        return time.gmtime
    if timezone.lower() == 'local':
        return time.localtime
    tz = pytz.timezone(timezone)

    def custom_time(*args):
        # `Formatter.converter` is called with the record's creation timestamp.
        ts = args[-1] if args else time.time()
        utc_dt = datetime.fromtimestamp(ts, _timezone.utc)
        return utc_dt.astimezone(tz).timetuple()

    return custom_time


def _make_config(
        *,
        level: Union[str, int, None] = None,
        with_thread_name: bool = False,
        timezone: str = 'UTC',
        **kwargs) -> dict:
    if level is None:
        level = os.environ.get('LOGLEVEL', 'info')
    if isinstance(level, str):
        level = log_level_from_str(level)

    datefmt = '%Y-%m-%d %H:%M:%S'

    msg = '[%(asctime)s.%(msecs)03d ' + timezone + \
        '; %(levelname)s; %(name)s, %(funcName)s, %(lineno)d]'
    msg += '  '

    if with_thread_name:
        fmt = f'{msg}[%(threadName)s]  %(message)s'
    else:
        fmt = f'{msg}%(message)s'

    return dict(format=fmt, datefmt=datefmt, level=level, **kwargs)


def config_logger(level: Union[str, int, None] = None, *, timezone: str = 'UTC', **kwargs) -> None:
    '''
    Configure the root logger.

    Parameters
    ----------
    level
        'debug', 'info', etc., or a numeric level like ``logging.DEBUG``.
        If ``None``, the environment variable ``LOGLEVEL`` is used,
        and if that is not set, 'info'.
    timezone
        Timezone of the timestamps: 'UTC', 'local', or a name known to ``pytz``,
        such as 'US/Pacific'.
    **kwargs
        ``with_thread_name``, or other arguments to ``logging.basicConfig``.
    '''
    kw = _make_config(level=level, timezone=timezone, **kwargs)
    converter = _make_converter(timezone)

    rootlogger = logging.getLogger()
    if rootlogger.hasHandlers():
        rootlogger.handlers = []

    logging.basicConfig(**kw)
    for h in rootlogger.handlers:
        if h.formatter is not None:
            h.formatter.converter = converter

    logging.captureWarnings(True)
    warnings.filterwarnings('default', category=ResourceWarning)
    warnings.filterwarnings('default', category=DeprecationWarning)


def get_log_level(name: Optional[str] = None) -> str:
    return log_level_to_str(logging.getLogger(name).getEffectiveLevel())
