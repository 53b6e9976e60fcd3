from __future__ import annotations
from typing import Any, Iterable, Mapping

import pandas as pd

from ..utils.log import get_logger
from .engine import DEFAULT_MAX_DEPTH, sanitize_tree
from .registry import get_rules, merge_rules
from .report import SanitizeReport
from .types import OMIT, RuleSet

log = get_logger("nestsafe.api")

RulesOverride = Mapping[str, Any] | None


def _check_depth(max_depth: Any) -> int:
    # bool is an int subclass; True/False as a depth is always a caller bug
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise ValueError(f"max_depth must be a non-negative int, got {max_depth!r}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    return max_depth


def _resolve(backend: str, rules_override: RulesOverride) -> RuleSet:
    return merge_rules(get_rules(backend), rules_override)


# ---- Public API ----

def sanitize(
    value: Any,
    *,
    backend: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    rules_override: RulesOverride = None,
) -> Any:
    """
    Sanitize `value` for `backend`. A value dropped as a whole (too deep, or an
    unknown type under strip_unknown_types) comes back as None.
    """
    depth = _check_depth(max_depth)
    rules = _resolve(backend, rules_override)
    out = sanitize_tree(value, rules, depth)
    log.debug("sanitized", extra={"backend": backend, "max_depth": depth})
    return None if out is OMIT else out


def sanitize_with_report(
    value: Any,
    *,
    backend: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    rules_override: RulesOverride = None,
) -> tuple[Any, SanitizeReport]:
    """Like sanitize(), plus a record of every path that was dropped and why."""
    depth = _check_depth(max_depth)
    rules = _resolve(backend, rules_override)
    report = SanitizeReport(backend=backend, max_depth=depth)
    out = sanitize_tree(value, rules, depth, report=report)
    log.debug(
        "sanitized",
        extra={"backend": backend, "max_depth": depth, "omitted": report.omitted, "by_reason": report.by_reason()},
    )
    return (None if out is OMIT else out), report


def sanitize_records(
    records: Iterable[Any] | pd.DataFrame,
    *,
    backend: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    rules_override: RulesOverride = None,
) -> list[Any]:
    """
    Sanitize each record independently (no identity memo shared across rows).
    A DataFrame is read row-wise via to_dict(orient="records").
    """
    depth = _check_depth(max_depth)
    rules = _resolve(backend, rules_override)
    rows = records.to_dict(orient="records") if isinstance(records, pd.DataFrame) else records

    out: list[Any] = []
    for row in rows:
        clean = sanitize_tree(row, rules, depth)
        out.append(None if clean is OMIT else clean)
    log.debug("sanitized_records", extra={"backend": backend, "rows": len(out)})
    return out
