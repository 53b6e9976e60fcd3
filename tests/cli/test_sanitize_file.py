from __future__ import annotations
import importlib.util
import json
from pathlib import Path

import pandas as pd
import pytest


@pytest.fixture(scope="module")
def cli(request):
    root = Path(request.config.rootpath)
    mod_spec = importlib.util.spec_from_file_location("sanitize_file", root / "scripts" / "sanitize_file.py")
    mod = importlib.util.module_from_spec(mod_spec)
    mod_spec.loader.exec_module(mod)
    return mod


def test_json_document_to_out_file(cli, tmp_path: Path, tmp_out: Path):
    src = tmp_path / "in.json"
    src.write_text(json.dumps({"username": {"$gt": ""}, "na.me": "alice"}), encoding="utf-8")
    out = tmp_out / "clean.json"

    assert cli.main([str(src), "--backend", "mongo", "--out", str(out)]) == 0
    assert json.loads(out.read_text(encoding="utf-8")) == {"username": {}, "na_me": "alice"}

def test_ndjson_with_report(cli, tmp_path: Path, capsys):
    src = tmp_path / "in.ndjson"
    src.write_text('{"a": "x\\r\\n"}\n\n{"b": ["ok", "y\\n"]}\n', encoding="utf-8")

    assert cli.main([str(src), "--backend", "redis", "--ndjson", "--report"]) == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out) == [{"a": "x"}, {"b": ["ok", "y"]}]
    report_line = [l for l in captured.err.splitlines() if '"by_reason"' in l][0]
    assert json.loads(report_line)["omitted"] == 0

def test_report_paths_include_row_index(cli, tmp_path: Path, capsys):
    src = tmp_path / "in.ndjson"
    src.write_text('{"ok": 1}\n{"$where": "1"}\n', encoding="utf-8")

    assert cli.main([str(src), "--backend", "mongo", "--ndjson", "--report"]) == 0
    err = capsys.readouterr().err
    report = json.loads([l for l in err.splitlines() if '"by_reason"' in l][0])
    assert report["paths"] == [{"path": "[1].$where", "reason": "forbidden_key"}]

def test_csv_table_mode(cli, tmp_path: Path, capsys):
    src = tmp_path / "rows.csv"
    pd.DataFrame({"name": ["a;b", "c"], "n": [1, 2]}).to_csv(src, index=False)

    assert cli.main([str(src), "--backend", "sql", "--table"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"name": "ab", "n": 1}, {"name": "c", "n": 2}]

def test_unknown_backend_exit_code(cli, tmp_path: Path, capsys):
    src = tmp_path / "in.json"
    src.write_text("{}", encoding="utf-8")
    assert cli.main([str(src), "--backend", "nope"]) == 2
    assert "No rules registered" in capsys.readouterr().err

def test_config_backends_available(cli, tmp_path: Path, cfg_path: Path, capsys):
    src = tmp_path / "in.json"
    src.write_text(json.dumps({"tenant_id": 1, "name": "n"}), encoding="utf-8")
    assert cli.main([str(src), "--config", str(cfg_path), "--backend", "mongo_tenant"]) == 0
    assert json.loads(capsys.readouterr().out) == {"name": "n"}

def test_table_mode_with_report(cli, tmp_path: Path, capsys):
    src = tmp_path / "rows.csv"
    pd.DataFrame({"$where": ["1", "2"], "name": ["a", "b"]}).to_csv(src, index=False)

    assert cli.main([str(src), "--backend", "mongo", "--table", "--report"]) == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out) == [{"name": "a"}, {"name": "b"}]
    report = json.loads([l for l in captured.err.splitlines() if '"by_reason"' in l][0])
    assert report["paths"] == [
        {"path": "[0].$where", "reason": "forbidden_key"},
        {"path": "[1].$where", "reason": "forbidden_key"},
    ]

def test_config_from_env_var(cli, tmp_path: Path, cfg_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("NESTSAFE_CFG", str(cfg_path))
    src = tmp_path / "in.json"
    src.write_text(json.dumps({"q": "-`-", "keep": "x"}), encoding="utf-8")
    assert cli.main([str(src), "--backend", "pg_jsonb"]) == 0
    assert json.loads(capsys.readouterr().out) == {"q": "", "keep": "x"}

def test_without_config_only_builtins_exist(cli, tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("NESTSAFE_CFG", raising=False)
    src = tmp_path / "in.json"
    src.write_text("{}", encoding="utf-8")
    assert cli.main([str(src), "--backend", "pg_jsonb"]) == 2
