from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal

OmitReason = Literal["pollution_key", "forbidden_key", "max_depth", "unknown_type"]

PathPart = str | int


@dataclass(frozen=True)
class OmitHit:
    path: tuple[PathPart, ...]
    reason: OmitReason

    def dotted(self) -> str:
        """'a.b[2].c' style rendering; the root itself renders as '$'."""
        if not self.path:
            return "$"
        out = []
        for p in self.path:
            if isinstance(p, int):
                out.append(f"[{p}]")
            else:
                out.append(("." if out else "") + p)
        return "".join(out)


@dataclass
class SanitizeReport:
    backend: str | None = None
    max_depth: int | None = None
    hits: list[OmitHit] = field(default_factory=list)

    def record(self, path: tuple[PathPart, ...], reason: OmitReason) -> None:
        self.hits.append(OmitHit(path=path, reason=reason))

    @property
    def omitted(self) -> int:
        return len(self.hits)

    def by_reason(self) -> dict[str, int]:
        return dict(Counter(h.reason for h in self.hits))

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend": self.backend,
            "max_depth": self.max_depth,
            "omitted": self.omitted,
            "by_reason": self.by_reason(),
            "paths": [{"path": h.dotted(), "reason": h.reason} for h in self.hits],
        }
