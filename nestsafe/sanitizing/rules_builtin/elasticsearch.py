from __future__ import annotations
import re

from ..types import PassThroughScrubber, RuleSet

__all__ = ["elasticsearch_rules"]

# Painless scripts can run anywhere in the query DSL, so drop "script" at every level.
elasticsearch_rules = RuleSet(
    forbidden_keys=(re.compile(r"^script$", re.IGNORECASE),),
    key_replace=None,
    sanitize_value=PassThroughScrubber(),
    strip_unknown_types=True,
)
