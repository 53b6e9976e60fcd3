from __future__ import annotations
import re

from ..types import PatternStripScrubber, RuleSet

__all__ = ["redis_rules", "RESP_CONTROL_CHARS"]

# CR/LF split RESP frames; NUL truncates in some clients.
RESP_CONTROL_CHARS = re.compile(r"[\r\n\x00]")

redis_rules = RuleSet(
    forbidden_keys=(),
    key_replace=RESP_CONTROL_CHARS,
    sanitize_value=PatternStripScrubber(RESP_CONTROL_CHARS),
    strip_unknown_types=True,
)
