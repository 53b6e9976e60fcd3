from __future__ import annotations
import re
from typing import Any

from ..config_model.model import BackendRuleCfg, RootCfg
from ..utils.fp import compose, unique_stable
from ..utils.log import configure_logging, get_logger
from .registry import freeze, get_rules, register, registered_backends
from .types import KeyMatcher, PassThroughScrubber, PatternStripScrubber, RuleSet, ValueScrubber

log = get_logger("nestsafe.policy")


def _until_stable(fn: ValueScrubber) -> ValueScrubber:
    """Re-run `fn` on string leaves until they stop changing."""
    def run(value: Any) -> Any:
        while True:
            out = fn(value)
            if not isinstance(out, str) or out == value:
                return out
            value = out
    return run


def _chain_scrubbers(base: ValueScrubber, extra: list[str], flags: int) -> ValueScrubber:
    # base scrubber first, then this backend's extra strips
    own = [re.compile(p, flags) for p in extra]
    if isinstance(base, PatternStripScrubber):
        return PatternStripScrubber(*base.patterns, *own)
    if isinstance(base, PassThroughScrubber):
        return PatternStripScrubber(*own)
    return _until_stable(compose(PatternStripScrubber(*own), base))


def _compile_one(bcfg: BackendRuleCfg, base: RuleSet | None) -> RuleSet:
    flags = re.IGNORECASE if bcfg.ignore_case else 0
    base = base or RuleSet()

    own: list[KeyMatcher] = [*bcfg.forbidden_prefixes]
    own.extend(re.compile(p, flags) for p in bcfg.forbidden_patterns)
    forbidden = unique_stable([*base.forbidden_keys, *own])

    key_replace = re.compile(bcfg.key_replace, flags) if bcfg.key_replace is not None else base.key_replace

    scrub = base.sanitize_value
    if bcfg.value_strip_patterns:
        scrub = _chain_scrubbers(base.sanitize_value, bcfg.value_strip_patterns, flags)

    strip_unknown = base.strip_unknown_types if bcfg.strip_unknown_types is None else bcfg.strip_unknown_types

    return RuleSet(
        forbidden_keys=tuple(forbidden),
        key_replace=key_replace,
        sanitize_value=scrub,
        strip_unknown_types=strip_unknown,
    )


def build_rules_from_config(root_cfg: RootCfg) -> dict[str, RuleSet]:
    """
    Build RuleSets for every [backends.<name>] table. `extends` may point at
    another configured backend or at anything already registered.
    Pure apart from registry reads: nothing is registered here.
    """
    tables = dict(root_cfg.backends)
    built: dict[str, RuleSet] = {}

    def _build(name: str, chain: tuple[str, ...]) -> RuleSet:
        if name in built:
            return built[name]
        if name in chain:
            raise ValueError(f"cyclic 'extends' chain: {' -> '.join((*chain, name))}")
        bcfg = tables[name]
        base: RuleSet | None = None
        if bcfg.extends is not None:
            if bcfg.extends in tables:
                base = _build(bcfg.extends, (*chain, name))
            else:
                base = get_rules(bcfg.extends)
        built[name] = _compile_one(bcfg, base)
        return built[name]

    for name in tables:
        _build(name, ())
    return built


def install_from_config(root_cfg: RootCfg) -> dict[str, RuleSet]:
    """Apply logging, register configured backends, then freeze if asked."""
    configure_logging(root_cfg.logging.level, root_cfg.logging.structured_json)

    rules = build_rules_from_config(root_cfg)
    for name, rs in rules.items():
        register(name, rs)

    if root_cfg.defaults.backend not in registered_backends():
        raise ValueError(f"defaults.backend {root_cfg.defaults.backend!r} is not a registered backend")

    if root_cfg.registry.freeze_after_load:
        freeze()
    log.info("config_installed", extra={"backends": sorted(rules), "frozen": root_cfg.registry.freeze_after_load})
    return rules
