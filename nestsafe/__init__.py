from __future__ import annotations

from .sanitizing import (
    OMIT,
    RuleSet,
    BackendNotFoundError,
    sanitize,
    sanitize_with_report,
    sanitize_records,
    register,
    get_rules,
    merge_rules,
)

__all__ = [
    "OMIT", "RuleSet", "BackendNotFoundError",
    "sanitize", "sanitize_with_report", "sanitize_records",
    "register", "get_rules", "merge_rules",
]
