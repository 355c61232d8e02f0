import inspect
from collections.abc import Callable
from typing import Any, Optional


class _Finished:
    # Singleton marking the end of a stream; compare with ``is``.
    __slots__ = ()

    def __repr__(self):
        return 'FINISHED'

    def __reduce__(self):
        return 'FINISHED'


FINISHED = _Finished()
NOTSET = object()


def positional_arity(func: Callable) -> Optional[int]:
    """
    Return the number of required positional parameters of ``func``,
    or ``None`` if ``func`` takes ``*args``.

    Raises ``ValueError`` or ``TypeError`` if the signature can not be inspected.
    """
    n = 0
    for p in inspect.signature(func).parameters.values():
        if p.kind is p.VAR_POSITIONAL:
            return None
        if (
            p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
            and p.default is p.empty
        ):
            n += 1
    return n


def bind_callback(func: Callable, nargs: int, *, min_nargs: int = 1) -> Callable:
    """
    Adapt a user callback so that it can always be called with ``nargs``
    positional arguments.

    The stream operators call predicates and mappers as
    ``func(value, index, context)`` and reducers as
    ``func(accumulator, value, index, context)``.
    Users often only care about the first one or two of these,
    so ``func`` gets as many leading arguments as it has required positional
    parameters, but never fewer than ``min_nargs``. A callable whose signature
    can not be inspected gets at least the value.

    >>> f = bind_callback(lambda x: x * 2, 3)
    >>> f(4, 0, None)
    8
    >>> f = bind_callback(lambda x, i: (i, x), 3)
    >>> f('a', 7, None)
    (7, 'a')
    >>> bind_callback(lambda: 'tick', 3, min_nargs=0)(4, 0, None)
    'tick'
    """
    if not callable(func):
        raise TypeError(f"expecting a callable but got {type(func).__name__!r}")
    try:
        n = positional_arity(func)
    except (TypeError, ValueError):
        # Some builtins, e.g. ``str``, have no inspectable signature.
        n = max(min_nargs, 1)
    if n is None or n >= nargs:
        return func
    n = max(n, min_nargs)
    if n == nargs:
        return func

    def f(*args):
        return func(*args[:n])

    return f


def same(x: Any, y: Any) -> bool:
    # Membership test the way `list.__contains__` does it.
    return x is y or x == y


def first_of_pair(e):
    return e[0]


def second_of_pair(e):
    return e[1]


def object_items(obj) -> list:
    """
    Return the key/value pairs of a mapping, or of the instance attributes of
    a plain object.
    """
    items = getattr(obj, 'items', None)
    if callable(items):
        return list(items())
    try:
        return list(vars(obj).items())
    except TypeError:
        raise TypeError(
            f"can not get key/value pairs from object of type {type(obj).__name__!r}"
        ) from None
