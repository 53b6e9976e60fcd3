from __future__ import annotations

# Public API re-exports (keep small & stable)
from .types import OMIT, RuleSet, ValueKind, ValueScrubber, PassThroughScrubber, PatternStripScrubber
from .guards import POLLUTION_KEYS, classify, is_pollution_key, match_forbidden
from .engine import DEFAULT_MAX_DEPTH, create_engine, sanitize_tree
from .registry import (
    BackendNotFoundError,
    register,
    get_rules,
    merge_rules,
    registered_backends,
    freeze,
    is_frozen,
    reset_registry,
)
from .report import OmitHit, SanitizeReport
from .api import sanitize, sanitize_with_report, sanitize_records
from .policy import build_rules_from_config, install_from_config

__all__ = [
    "OMIT", "RuleSet", "ValueKind", "ValueScrubber", "PassThroughScrubber", "PatternStripScrubber",
    "POLLUTION_KEYS", "classify", "is_pollution_key", "match_forbidden",
    "DEFAULT_MAX_DEPTH", "create_engine", "sanitize_tree",
    "BackendNotFoundError", "register", "get_rules", "merge_rules", "registered_backends",
    "freeze", "is_frozen", "reset_registry",
    "OmitHit", "SanitizeReport",
    "sanitize", "sanitize_with_report", "sanitize_records",
    "build_rules_from_config", "install_from_config",
]
