from __future__ import annotations
from typing import Dict, List, Optional
from pathlib import Path
import os
import re
from pydantic import (
    BaseModel,
    Field,
    model_validator,
    ConfigDict,
)


# ---------- Leaf models ----------

class DefaultsCfg(BaseModel):
    backend: str = "mongo"
    max_depth: int = Field(50, ge=0)


class LoggingCfg(BaseModel):
    level: str = "INFO"
    structured_json: bool = True


class RegistryCfg(BaseModel):
    freeze_after_load: bool = False


class BackendRuleCfg(BaseModel):
    """
    Declarative RuleSet. With `extends`, lists are appended to the base
    backend's, scalars replace it only when set.
    """
    model_config = ConfigDict(extra="forbid")

    extends: Optional[str] = None
    forbidden_prefixes: List[str] = []
    forbidden_patterns: List[str] = []
    key_replace: Optional[str] = None
    value_strip_patterns: List[str] = []
    strip_unknown_types: Optional[bool] = None
    ignore_case: bool = False

    @model_validator(mode="after")
    def _patterns_compile(self):
        flags = re.IGNORECASE if self.ignore_case else 0
        pats = [*self.forbidden_patterns, *self.value_strip_patterns]
        if self.key_replace is not None:
            pats.append(self.key_replace)
        for p in pats:
            try:
                re.compile(p, flags)
            except re.error as e:
                raise ValueError(f"invalid regex {p!r}: {e}") from e
        return self


# ---------- Root ----------

class RootCfg(BaseModel):
    model_config = ConfigDict(extra="ignore")

    defaults: DefaultsCfg = DefaultsCfg()
    logging: LoggingCfg = LoggingCfg()
    registry: RegistryCfg = RegistryCfg()
    backends: Dict[str, BackendRuleCfg] = {}

    @model_validator(mode="after")
    def _no_self_extends(self):
        for name, b in self.backends.items():
            if b.extends == name:
                raise ValueError(f"backend {name!r} cannot extend itself")
        return self

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str]) -> "RootCfg":
        try:
            import tomllib  # py>=3.11
        except Exception:
            import tomli as tomllib

        p = Path(path)

        def _parse_raw_dict() -> dict:
            try:
                with p.open("rb") as f:
                    return tomllib.load(f)
            except (tomllib.TOMLDecodeError, UnicodeDecodeError):
                pass

            # Retry: utf-8-sig strips a leading BOM that some editors write
            text = p.read_text(encoding="utf-8-sig", errors="replace")
            try:
                return tomllib.loads(text)
            except tomllib.TOMLDecodeError as e:
                snippet = text[:80].replace("\n", "\\n")
                raise RuntimeError(f"Failed to parse TOML at {p}. First chars: {snippet!r}") from e

        raw = _parse_raw_dict()

        raw.setdefault("defaults", {})
        raw.setdefault("logging", {})
        raw.setdefault("registry", {})
        raw.setdefault("backends", {})

        # shim: accept [defaults].depth as an alias of max_depth
        if "depth" in raw["defaults"] and "max_depth" not in raw["defaults"]:
            raw["defaults"]["max_depth"] = raw["defaults"].pop("depth")

        return cls(
            defaults=DefaultsCfg(**raw["defaults"]),
            logging=LoggingCfg(**raw["logging"]),
            registry=RegistryCfg(**raw["registry"]),
            backends={name: BackendRuleCfg(**b) for name, b in raw["backends"].items()},
        )

    @classmethod
    def load(cls, path: str | None = None) -> "RootCfg":
        final = Path(path or os.environ.get("NESTSAFE_CFG", "config/config.toml")).resolve()
        return cls.from_toml(final)


# Convenience import for callers
def load_config(path: str | None = None) -> RootCfg:
    return RootCfg.load(path)
