from __future__ import annotations
import re

from ..types import PatternStripScrubber, RuleSet

__all__ = ["sql_rules", "SQL_CONTROL_CHARS", "SQL_COMMENT_AND_TERMINATORS", "SQL_QUOTES"]

# NOTE: this only blunts obvious payloads. Always bind parameters.
SQL_CONTROL_CHARS = re.compile(r"[\x00\x08\x09\x1a\n\r\t]")
SQL_COMMENT_AND_TERMINATORS = re.compile(r"(--|;|/\*|\*/)")
SQL_QUOTES = re.compile(r"[\"'\\()]")

sql_rules = RuleSet(
    forbidden_keys=(),
    # semicolons in dynamic column/alias names
    key_replace=re.compile(r";"),
    sanitize_value=PatternStripScrubber(SQL_CONTROL_CHARS, SQL_COMMENT_AND_TERMINATORS, SQL_QUOTES),
    strip_unknown_types=True,
)
