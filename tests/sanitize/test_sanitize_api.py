from __future__ import annotations

import pandas as pd
import pytest

from nestsafe import sanitize, sanitize_records, sanitize_with_report
from nestsafe.sanitizing import BackendNotFoundError, RuleSet, register


class _Blob:
    pass


def test_sanitize_unknown_backend_raises():
    with pytest.raises(BackendNotFoundError):
        sanitize({"a": 1}, backend="nope")

def test_root_omit_becomes_none():
    assert sanitize(_Blob(), backend="mongo") is None

def test_default_max_depth_is_50():
    nested: object = "leaf"
    for _ in range(50):
        nested = {"k": nested}
    out = sanitize(nested, backend="mongo")
    for _ in range(50):
        out = out["k"]
    assert out == "leaf"

    deeper = {"k": nested}
    out = sanitize(deeper, backend="mongo")
    for _ in range(50):
        out = out["k"]
    assert out == {}

@pytest.mark.parametrize("bad", [-1, 1.5, "3", True, None])
def test_invalid_max_depth_rejected(bad):
    with pytest.raises(ValueError):
        sanitize({}, backend="mongo", max_depth=bad)

def test_large_max_depth_with_hostile_nesting_is_total():
    nested: object = {"$where": "1", "v": "x"}
    for _ in range(2000):
        nested = {"a.b": nested}
    out = sanitize(nested, backend="mongo", max_depth=5000)
    for _ in range(2000):
        out = out["a_b"]
    assert out == {"v": "x"}

def test_rules_override_replaces_fields_per_call():
    thing = _Blob()
    out = sanitize({"t": thing, "$gt": 1}, backend="mongo", rules_override={"strip_unknown_types": False})
    assert out == {"t": thing}

    upper = sanitize({"a": "x"}, backend="mongo", rules_override={"sanitize_value": lambda v: v.upper() if isinstance(v, str) else v})
    assert upper == {"a": "X"}

    # next call without override sees the registered rules again
    assert sanitize({"t": thing}, backend="mongo") == {}

def test_rules_override_cannot_reenable_pollution_keys():
    out = sanitize({"__proto__": 1, "a": 1}, backend="mongo", rules_override={"forbidden_keys": []})
    assert out == {"a": 1}

def test_registered_backend_is_usable():
    register("strict", RuleSet(forbidden_keys=["_"], strip_unknown_types=True))
    assert sanitize({"_id": 1, "name": "a"}, backend="strict") == {"name": "a"}

def test_sanitize_with_report():
    out, report = sanitize_with_report({"$where": 1, "a": {"b.c": 2}}, backend="mongo", max_depth=1)
    assert out == {"a": {}}
    d = report.to_dict()
    assert d["backend"] == "mongo"
    assert d["max_depth"] == 1
    assert d["omitted"] == 2
    assert d["by_reason"] == {"forbidden_key": 1, "max_depth": 1}
    assert d["paths"] == [
        {"path": "$where", "reason": "forbidden_key"},
        {"path": "a.b.c", "reason": "max_depth"},
    ]

def test_sanitize_records_rows_are_independent():
    shared = {"v": "a\r"}
    rows = [{"x": shared}, {"x": shared, "$y": 1}]
    out = sanitize_records(rows, backend="redis")
    assert out == [{"x": {"v": "a"}}, {"x": {"v": "a"}, "$y": 1}]
    assert out[0]["x"] is not out[1]["x"]

def test_sanitize_records_dataframe():
    df = pd.DataFrame({"name": ["Robert'); DROP TABLE users;--", "ok"], "n": [1, 2]})
    out = sanitize_records(df, backend="sql")
    assert out == [{"name": "Robert DROP TABLE users", "n": 1}, {"name": "ok", "n": 2}]

def test_sanitize_records_unknown_row_becomes_none():
    assert sanitize_records([{"a": 1}, _Blob()], backend="mongo") == [{"a": 1}, None]

def test_partial_override_keeps_backend_value_stripping():
    out = sanitize({"x": 1, "name": "Robert'); DROP TABLE users;--"}, backend="sql",
                   rules_override={"forbidden_keys": ["x"]})
    assert out == {"name": "Robert DROP TABLE users"}

def test_ruleset_override_is_rejected():
    with pytest.raises(TypeError):
        sanitize({"a": 1}, backend="sql", rules_override=RuleSet(forbidden_keys=("x",)))
