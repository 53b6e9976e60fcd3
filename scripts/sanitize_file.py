from __future__ import annotations
import argparse, json, os, sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

import pandas as pd

from nestsafe.config_model.model import RootCfg
from nestsafe.sanitizing import (
    BackendNotFoundError,
    SanitizeReport,
    install_from_config,
    sanitize_with_report,
)
from nestsafe.utils.log import get_logger

# ------------------------ helpers ------------------------

def _read_input(path: Optional[str], ndjson: bool) -> Any:
    """Whole JSON document, or a list of records when --ndjson."""
    if path in (None, "-"):
        text = sys.stdin.read()
    else:
        text = Path(path).read_text(encoding="utf-8")
    if ndjson:
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    return json.loads(text)

def _read_table(path: str) -> pd.DataFrame:
    """CSV/parquet rows for --table mode."""
    ext = Path(path).suffix.lower()
    if ext in {".parquet", ".pq"}:
        return pd.read_parquet(path)
    return pd.read_csv(path)

def _sanitize_rows(rows: List[Any], backend: str, max_depth: int) -> Tuple[List[Any], SanitizeReport]:
    """Each row on its own; report paths are prefixed with the row index."""
    clean, report = [], SanitizeReport(backend=backend, max_depth=max_depth)
    for i, row in enumerate(rows):
        c, r = sanitize_with_report(row, backend=backend, max_depth=max_depth)
        clean.append(c)
        for h in r.hits:
            report.record((i, *h.path), h.reason)
    return clean, report

def _dump(obj: Any, out: Optional[str], indent: Optional[int]) -> None:
    text = json.dumps(obj, ensure_ascii=False, indent=indent, default=str)
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")

# ------------------------ main ------------------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Sanitize a JSON document (or records) for one storage backend.")
    ap.add_argument("input", nargs="?", default="-", help="JSON file, '-' for stdin")
    ap.add_argument("--backend", default=None, help="Backend name; defaults to [defaults].backend from config")
    ap.add_argument("--config", default=None, help="TOML config with extra [backends.*]; defaults to $NESTSAFE_CFG")
    ap.add_argument("--max-depth", type=int, default=None)
    ap.add_argument("--ndjson", action="store_true", help="Treat input as one JSON record per line")
    ap.add_argument("--table", action="store_true", help="Treat input as CSV/parquet rows")
    ap.add_argument("--out", default=None, help="Write JSON here instead of stdout")
    ap.add_argument("--indent", type=int, default=None)
    ap.add_argument("--report", action="store_true", help="Print the omission summary to stderr")
    args = ap.parse_args(argv)

    # --config wins, then NESTSAFE_CFG; with neither only the builtin backends exist
    use_config = bool(args.config or os.environ.get("NESTSAFE_CFG"))
    cfg = RootCfg.load(args.config) if use_config else RootCfg()
    if use_config:
        install_from_config(cfg)
    log = get_logger("nestsafe.cli", cfg.logging.level, cfg.logging.structured_json)

    backend = args.backend or cfg.defaults.backend
    max_depth = cfg.defaults.max_depth if args.max_depth is None else args.max_depth

    try:
        if args.table:
            rows = _read_table(args.input).to_dict(orient="records")
            clean, report = _sanitize_rows(rows, backend, max_depth)
        elif args.ndjson:
            clean, report = _sanitize_rows(_read_input(args.input, ndjson=True), backend, max_depth)
        else:
            clean, report = sanitize_with_report(_read_input(args.input, ndjson=False), backend=backend, max_depth=max_depth)
    except BackendNotFoundError as e:
        log.error("backend_not_found", extra={"backend": backend})
        print(f"error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # bad JSON or bad --max-depth
        print(f"error: {e}", file=sys.stderr)
        return 2

    _dump(clean, args.out, args.indent)
    if args.report:
        print(json.dumps(report.to_dict(), ensure_ascii=False), file=sys.stderr)
    log.info("done", extra={"backend": backend, "omitted": report.omitted})
    return 0


if __name__ == "__main__":
    sys.exit(main())
