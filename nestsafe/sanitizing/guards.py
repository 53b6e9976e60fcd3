from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable
import re

import numpy as np
import pandas as pd

from .types import KeyMatcher, ValueKind

__all__ = ["POLLUTION_KEYS", "is_pollution_key", "match_forbidden", "classify"]

# Keys that reach or reassign an object's inheritance chain (JS prototype names
# for documents consumed by JS drivers, Python dunders for everything else).
# Engine-owned: no RuleSet can add to or remove from this set.
POLLUTION_KEYS: frozenset[str] = frozenset({
    "__proto__",
    "prototype",
    "constructor",
    "__class__",
    "__dict__",
    "__globals__",
    "__builtins__",
})

_PRIMITIVES = (str, int, float, bool, Decimal, np.bool_, np.number)
_OPAQUE = (datetime, date, time, re.Pattern, np.datetime64)


def is_pollution_key(key: str) -> bool:
    return key in POLLUTION_KEYS


def match_forbidden(key: str, matchers: Iterable[KeyMatcher]) -> bool:
    """str -> prefix test, compiled pattern -> search()."""
    for m in matchers:
        if isinstance(m, str):
            if key.startswith(m):
                return True
        elif m.search(key):
            return True
    return False


def _is_nullish(value: Any) -> bool:
    return value is None or value is pd.NA


def classify(value: Any) -> ValueKind:
    """
    Tag a value once so the engine can dispatch on the kind instead of
    re-running instance checks. Order matters: bool/str/int before anything
    container-like, timestamps before the unknown fallback.
    """
    if _is_nullish(value) or isinstance(value, _PRIMITIVES):
        return ValueKind.PRIMITIVE
    # pd.Timestamp and pd.NaT are datetime subclasses
    if isinstance(value, _OPAQUE) or value is pd.NaT:
        return ValueKind.OPAQUE
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    # exact dict only: subclasses (OrderedDict, defaultdict, custom mappings) carry behavior
    if type(value) is dict:
        return ValueKind.MAPPING
    return ValueKind.UNKNOWN
