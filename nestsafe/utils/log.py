from __future__ import annotations
import json, logging, sys
from typing import Any, Dict, TextIO

_RESERVED = ("name", "msg", "args", "levelname", "levelno",
             "pathname", "filename", "module", "exc_info",
             "exc_text", "stack_info", "lineno", "funcName",
             "created", "msecs", "relativeCreated", "thread",
             "threadName", "processName", "process", "taskName")

class _StderrHandler(logging.StreamHandler):
    """Resolves sys.stderr on every emit so redirected stderr is honoured."""
    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value: TextIO) -> None:
        pass

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # attach extra if present
        for k, v in getattr(record, "__dict__", {}).items():
            if k not in _RESERVED:
                payload[k] = v
        return json.dumps(payload, separators=(",", ":"), default=str)

def get_logger(
    name: str = "nestsafe",
    level: str = "INFO",
    structured_json: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    # stderr: stdout belongs to the CLI's sanitized output
    handler = logging.StreamHandler(stream) if stream is not None else _StderrHandler()
    if structured_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger

def configure_logging(level: str = "INFO", structured_json: bool = True, prefix: str = "nestsafe") -> None:
    """Re-apply level/format to every logger already created under `prefix`."""
    names = [n for n in list(logging.root.manager.loggerDict)
             if n == prefix or n.startswith(prefix + ".")]
    if prefix not in names:
        names.append(prefix)
    for n in names:
        logger = logging.getLogger(n)
        for h in list(logger.handlers):
            logger.removeHandler(h)
        get_logger(n, level=level, structured_json=structured_json)
