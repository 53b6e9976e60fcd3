from __future__ import annotations
import re

from ..types import PassThroughScrubber, RuleSet

__all__ = ["mongo_rules"]

# Query operators ($gt, $where, ...) and the prototype names older drivers honour.
mongo_rules = RuleSet(
    forbidden_keys=(re.compile(r"^\$"), "__proto__", "prototype", "constructor"),
    # dots address nested paths in field names
    key_replace=re.compile(r"\."),
    # no coercion: "5" stays "5"
    sanitize_value=PassThroughScrubber(),
    strip_unknown_types=True,
)
