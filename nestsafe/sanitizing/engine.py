from __future__ import annotations
from typing import Any, Callable, Iterator

from .guards import classify, is_pollution_key, match_forbidden
from .report import PathPart, SanitizeReport
from .types import OMIT, RuleSet, ValueKind

DEFAULT_MAX_DEPTH = 50
KEY_PLACEHOLDER = "_"

EngineFn = Callable[..., Any]
OptPath = tuple[PathPart, ...] | None
Child = tuple[Any, Any, OptPath]


def _child(path: OptPath, part: PathPart) -> OptPath:
    # paths are only built when someone is collecting a report
    return None if path is None else path + (part,)


class _Frame:
    """A container being filled: its output, its pending children, its depth."""
    __slots__ = ("out", "items", "depth", "as_tuple", "slot")

    def __init__(self, out: Any, items: Iterator[Child], depth: int, as_tuple: bool = False) -> None:
        self.out = out
        self.items = items
        self.depth = depth
        self.as_tuple = as_tuple
        self.slot: Any = None

    def put(self, clean: Any) -> None:
        if isinstance(self.out, dict):
            if clean is not OMIT:
                self.out[self.slot] = clean
        else:
            # omitted elements stay as None holes so indices never shift
            self.out.append(None if clean is OMIT else clean)

    def finish(self) -> Any:
        return tuple(self.out) if self.as_tuple else self.out


class _Walk:
    """
    State for ONE top-level call: the identity memo and the optional report.
    Never shared between calls. Containers go on an explicit stack, so nesting
    is bounded by max_depth alone and never by the interpreter's recursion limit.
    """
    __slots__ = ("rules", "max_depth", "visited", "report")

    def __init__(self, rules: RuleSet, max_depth: int, report: SanitizeReport | None) -> None:
        self.rules = rules
        self.max_depth = max_depth
        self.visited: dict[int, Any] = {}
        self.report = report

    def _omit(self, path: OptPath, reason: str) -> Any:
        if self.report is not None and path is not None:
            self.report.record(path, reason)  # type: ignore[arg-type]
        return OMIT

    def _enter(self, value: Any, depth: int, path: OptPath) -> Any:
        """Finished value for leaves and memo hits; a _Frame for a container still to fill."""
        if depth > self.max_depth:
            return self._omit(path, "max_depth")

        kind = classify(value)

        if kind is ValueKind.PRIMITIVE:
            return self.rules.sanitize_value(value)
        if kind is ValueKind.OPAQUE:
            return value
        if kind is ValueKind.UNKNOWN:
            if self.rules.strip_unknown_types:
                return self._omit(path, "unknown_type")
            return value
        if kind is ValueKind.SEQUENCE and isinstance(value, tuple):
            # tuples cannot be allocated ahead, so they are never memoized
            return _Frame([], self._sequence_items(value, path), depth, as_tuple=True)

        key = id(value)
        if key in self.visited:
            return self.visited[key]

        # register before filling so back-references resolve to this same output
        if kind is ValueKind.SEQUENCE:
            frame = _Frame([], self._sequence_items(value, path), depth)
        else:
            frame = _Frame({}, self._mapping_items(value, path), depth)
        self.visited[key] = frame.out
        return frame

    def _sequence_items(self, seq: list | tuple, path: OptPath) -> Iterator[Child]:
        for i, v in enumerate(seq):
            yield i, v, _child(path, i)

    def _mapping_items(self, obj: dict, path: OptPath) -> Iterator[Child]:
        # lazy, so omissions are reported in document order
        rules = self.rules
        for raw_key, value in obj.items():
            k = str(raw_key)
            if is_pollution_key(k):
                self._omit(_child(path, k), "pollution_key")
                continue
            if match_forbidden(k, rules.forbidden_keys):
                self._omit(_child(path, k), "forbidden_key")
                continue

            safe_key = rules.key_replace.sub(KEY_PLACEHOLDER, k) if rules.key_replace is not None else k
            # "._proto__" must not turn into "__proto__" on the way out
            if safe_key != k and is_pollution_key(safe_key):
                self._omit(_child(path, k), "pollution_key")
                continue
            yield safe_key, value, _child(path, k)

    def run(self, value: Any, path: OptPath) -> Any:
        top = self._enter(value, 0, path)
        if not isinstance(top, _Frame):
            return top

        stack = [top]
        while True:
            frame = stack[-1]
            item = next(frame.items, None)
            if item is None:
                stack.pop()
                done = frame.finish()
                if not stack:
                    return done
                stack[-1].put(done)
                continue

            frame.slot, child, child_path = item
            clean = self._enter(child, frame.depth + 1, child_path)
            if isinstance(clean, _Frame):
                stack.append(clean)
            else:
                frame.put(clean)


# ---- Public API ----

def sanitize_tree(
    value: Any,
    rules: RuleSet,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    report: SanitizeReport | None = None,
) -> Any:
    """
    Walk `value` once under `rules` and return a sanitized copy, or OMIT when
    the whole value must be dropped. Pure: the input is never mutated.
    """
    walk = _Walk(rules, max_depth, report)
    return walk.run(value, () if report is not None else None)


def create_engine(rules: RuleSet, max_depth: int = DEFAULT_MAX_DEPTH) -> EngineFn:
    """Bind rules + depth once; each call of the returned function gets fresh state."""
    def run(value: Any, *, report: SanitizeReport | None = None) -> Any:
        return sanitize_tree(value, rules, max_depth, report=report)
    return run
