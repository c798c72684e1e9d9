"""
txcore.logging
--------------

Structured logging on top of the stdlib `logging` module.

- Two output shapes: one JSON object per line, or a compact text line.
- Context fields (trace_id, command, txid, group_id, ...) live in a
  `ContextVar`, so they follow the current thread/task and are stamped on
  every record emitted while bound.
- Values are made JSON-safe on the way in: bytes become hex, paths and
  unknown objects become strings.

Usage
-----
    from txcore import logging as tlog

    tlog.configure(json=False, level="INFO")  # once, from an entrypoint
    log = tlog.get_logger(__name__)

    with tlog.trace_scope():
        tlog.bind(command="group")
        log.info("group assigned", extra={"members": 3})

Library modules only ever call `get_logger`; handlers are installed by
`configure` (the CLI does this), never at import.
"""

from __future__ import annotations

import datetime as _dt
import json as _json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, TextIO, Tuple

_CTX: ContextVar[Mapping[str, Any]] = ContextVar("txcore_log_ctx", default={})

# Shown first, in this order, by the text formatter.
DEFAULT_CONTEXT_KEYS = ("trace_id", "component", "command", "txid", "group_id")

_STD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


# ----------------------------
# Context
# ----------------------------


def context() -> Dict[str, Any]:
    """Copy of the fields currently bound."""
    return dict(_CTX.get())


def bind(**fields: Any) -> None:
    _CTX.set({**_CTX.get(), **{k: _safe(v) for k, v in fields.items()}})


def unbind(*keys: str) -> None:
    _CTX.set({k: v for k, v in _CTX.get().items() if k not in keys})


def clear_context() -> None:
    _CTX.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """Bind a trace_id for the duration of the block; the previous context comes back on exit."""
    token = _CTX.set(dict(_CTX.get()))
    tid = trace_id or short_uuid()
    bind(trace_id=tid)
    try:
        yield tid
    finally:
        _CTX.reset(token)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# ----------------------------
# Formatting
# ----------------------------


def _safe(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_safe(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _safe(x) for k, x in v.items()}
    return str(v)


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _safe(v)
        for k, v in vars(record).items()
        if k not in _STD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    when = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return when.isoformat(timespec="milliseconds")


def _exc_text(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)).rstrip()  # type: ignore[misc]


class JSONFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg, bound context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        doc: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        doc.update(context())
        for k, v in _record_extras(record).items():
            doc.setdefault(k, v)
        if record.exc_info:
            doc["err"] = _exc_text(record)
        return _json.dumps(doc, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """
    Single line per record:

        2026-01-05T12:34:56.789+00:00 | INFO | txcore.cli | trace_id=ab12 command=id | computed id
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        pairs = [f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None]
        pairs += [f"{k}={v}" for k, v in ctx.items() if k not in DEFAULT_CONTEXT_KEYS]
        pairs += [f"{k}={v}" for k, v in _record_extras(record).items() if k not in ctx]

        parts = [_timestamp(record), record.levelname, record.name]
        if pairs:
            parts.append(" ".join(pairs))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + _exc_text(record)
        return line


# ----------------------------
# Setup
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: Optional[str | int] = None,
    stream: Optional[TextIO] = None,
    file_path: Optional[Path | str] = None,
    propagate_existing: bool = False,
) -> None:
    """
    Install handlers on the root logger.

    json=None picks the format from TXCORE_LOG_FORMAT (json|text), else JSON
    when the stream is not a terminal. level=None reads TXCORE_LOG_LEVEL
    (default INFO). `file_path` adds a JSON-lines file handler. Existing root
    handlers are removed unless `propagate_existing`.
    """
    stream = stream if stream is not None else sys.stderr
    lvl = coerce_level(level if level is not None else os.environ.get("TXCORE_LOG_LEVEL", "INFO"))

    root = logging.getLogger()
    if not propagate_existing:
        for h in list(root.handlers):
            root.removeHandler(h)
    root.setLevel(lvl)

    console = logging.StreamHandler(stream)
    console.setFormatter(JSONFormatter() if _decide_json(json, stream) else TextFormatter())
    root.addHandler(console)

    if file_path:
        path = Path(file_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def configure_from_config(cfg: Any) -> None:
    """Configure from a `txcore.config.Config` (its `log` section)."""
    fmt = (cfg.log.format or "").strip().lower()
    configure(
        json={"json": True, "text": False}.get(fmt),
        level=cfg.log.level,
        file_path=cfg.log.file,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "txcore")


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed fields to every call; call-site `extra` wins on conflicts."""

    def process(self, msg: Any, kwargs: Any) -> Tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_fields(logger: logging.Logger, **fields: Any) -> ContextAdapter:
    return ContextAdapter(logger, {k: _safe(v) for k, v in fields.items()})


def coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVELS.get(str(level).strip().upper(), logging.INFO)


def _decide_json(json_flag: Optional[bool], stream: Any) -> bool:
    if json_flag is not None:
        return json_flag
    env = os.environ.get("TXCORE_LOG_FORMAT", "").strip().lower()
    if env in ("json", "text"):
        return env == "json"
    try:
        return not stream.isatty()
    except (AttributeError, ValueError):
        return True


__all__ = [
    "DEFAULT_CONTEXT_KEYS",
    "context",
    "bind",
    "unbind",
    "clear_context",
    "trace_scope",
    "short_uuid",
    "JSONFormatter",
    "TextFormatter",
    "ContextAdapter",
    "configure",
    "configure_from_config",
    "get_logger",
    "with_fields",
    "coerce_level",
]
