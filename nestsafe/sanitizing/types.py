from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Union
import re

# -------- public types --------

KeyMatcher = Union[str, re.Pattern]


class ValueScrubber(Protocol):
    """Leaf transform for one backend. Must be pure: primitive in, primitive out."""

    def __call__(self, value: Any) -> Any: ...


class _Omit:
    """Marker returned for a field/element that must not reach the parent output."""
    _instance: "_Omit | None" = None

    def __new__(cls) -> "_Omit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMIT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Omit, ())


OMIT = _Omit()


class ValueKind(Enum):
    PRIMITIVE = "primitive"
    OPAQUE = "opaque"
    SEQUENCE = "sequence"
    UNKNOWN = "unknown"
    MAPPING = "mapping"


@dataclass(frozen=True)
class RuleSet:
    """
    Backend-scoped sanitization rules.

    forbidden_keys: str matchers are prefix tests, compiled patterns use search().
    key_replace: characters matching this are replaced with '_' in kept keys.
    sanitize_value: applied to every primitive leaf.
    strip_unknown_types: drop (True) or pass through (False) unsupported instances.
    """
    forbidden_keys: tuple[KeyMatcher, ...] = ()
    key_replace: re.Pattern | None = None
    sanitize_value: ValueScrubber = None  # type: ignore[assignment]
    strip_unknown_types: bool = True

    def __post_init__(self) -> None:
        # accept lists from callers/config but store immutably
        if not isinstance(self.forbidden_keys, tuple):
            object.__setattr__(self, "forbidden_keys", tuple(self.forbidden_keys))
        if self.sanitize_value is None:
            object.__setattr__(self, "sanitize_value", PassThroughScrubber())


# -------- scrubbers --------

class PassThroughScrubber:
    def __call__(self, value: Any) -> Any:
        return value

    def __repr__(self) -> str:
        return "PassThroughScrubber()"


class PatternStripScrubber:
    """
    Remove every match of each pattern from string leaves, in order, until
    nothing changes (so the scrubber is idempotent).
    Non-string leaves are returned unchanged.
    """

    def __init__(self, *patterns: str | re.Pattern, flags: int = 0) -> None:
        self.patterns: tuple[re.Pattern, ...] = tuple(
            p if isinstance(p, re.Pattern) else re.compile(p, flags) for p in patterns
        )

    def __call__(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        # repeat until stable: removing ";" from "-;-" leaves a fresh "--"
        while True:
            before = value
            for pat in self.patterns:
                value = pat.sub("", value)
            if value == before:
                return value

    def __repr__(self) -> str:
        return f"PatternStripScrubber({', '.join(repr(p.pattern) for p in self.patterns)})"
