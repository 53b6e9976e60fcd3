from __future__ import annotations
from typing import Any, Callable, Iterable, List, TypeVar

from toolz import compose as _compose
from more_itertools import unique_everseen as _unique_everseen

A = TypeVar("A")

def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    # toolz.compose composes right-to-left as expected
    return _compose(*fns)

def unique_stable(seq: Iterable[A], key: Callable[[A], Any] | None = None) -> List[A]:
    # Delegate to more-itertools; preserves first-seen order
    return list(_unique_everseen(seq, key=key))
