from __future__ import annotations
from dataclasses import fields, replace
from typing import Any, Mapping
import threading

from ..utils.log import get_logger
from .rules_builtin import BUILTIN_RULES
from .types import RuleSet

log = get_logger("nestsafe.registry")

_RULE_FIELDS = tuple(f.name for f in fields(RuleSet))


class BackendNotFoundError(LookupError):
    """No RuleSet registered under the requested backend name."""

    def __init__(self, backend: str) -> None:
        super().__init__(f"No rules registered for backend: {backend!r}")
        self.backend = backend


# -------- registry --------

_lock = threading.Lock()
_registry: dict[str, RuleSet] = dict(BUILTIN_RULES)
_frozen = False


def register(backend: str, rules: RuleSet) -> None:
    """Install or replace the RuleSet for `backend`. Only valid before freeze()."""
    global _registry
    if not isinstance(rules, RuleSet):
        raise TypeError(f"rules for {backend!r} must be a RuleSet, got {type(rules).__name__}")
    with _lock:
        if _frozen:
            raise RuntimeError(f"Registry is frozen; cannot register backend {backend!r}")
        replaced = backend in _registry
        # copy-on-write so readers never see a half-updated dict
        _registry = {**_registry, backend: rules}
    log.debug("backend_registered", extra={"backend": backend, "replaced": replaced})


def get_rules(backend: str) -> RuleSet:
    rules = _registry.get(backend)
    if rules is None:
        log.warning("backend_not_found", extra={"backend": backend})
        raise BackendNotFoundError(backend)
    return rules


def registered_backends() -> list[str]:
    return sorted(_registry)


def freeze() -> None:
    """End of startup: later register() calls fail."""
    global _frozen
    with _lock:
        _frozen = True
    log.debug("registry_frozen", extra={"backends": registered_backends()})


def is_frozen() -> bool:
    return _frozen


def reset_registry() -> None:
    """Back to the builtin backends, unfrozen."""
    global _registry, _frozen
    with _lock:
        _registry = dict(BUILTIN_RULES)
        _frozen = False


# -------- merge --------

def merge_rules(base: RuleSet, override: Mapping[str, Any] | None = None) -> RuleSet:
    """
    Field-wise overlay: present, non-None override values win, everything else
    falls back to `base`. Unknown override keys are ignored, not validated.

    Only mappings are accepted. A RuleSet fills every field it was not given
    with a default, so it cannot say which fields it means to replace.
    """
    if override is None:
        return base
    if not isinstance(override, Mapping):
        raise TypeError(
            f"rules override must be a mapping of RuleSet fields, got {type(override).__name__}"
        )
    changes = {k: v for k, v in override.items() if k in _RULE_FIELDS and v is not None}
    return replace(base, **changes) if changes else base
