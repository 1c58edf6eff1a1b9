from typing import Callable, Iterable, Iterator, TypeVar


T = TypeVar("T")
R = TypeVar("R")


def stream_transform(source: Iterable[T], fn: Callable[[T], R]) -> Iterator[R]:
    """Lazily map ``fn`` over ``source``, one upstream pull per downstream pull.

    Nothing is read from ``source`` until the first result is requested, and
    errors raised while advancing ``source`` reach the caller unchanged.
    """
    for item in source:
        yield fn(item)
