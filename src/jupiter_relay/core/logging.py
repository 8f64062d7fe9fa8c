"""
Logging helpers for the Jupiter relay adapters.

Every module obtains its logger through :func:`get_logger` so that batch runs,
HTTP calls, and credential lookups share one formatter. Structured values are
passed through ``extra`` and rendered as ``key=value`` pairs after the message,
which keeps per-record progress greppable without a JSON log pipeline.

The adapters returned here merge call-site ``extra`` with their bound context
(family, tags), so ``logger.debug("...", extra={"url": ...})`` keeps both.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from logging import Logger, LoggerAdapter
from typing import Any, Iterator, Mapping, MutableMapping, Optional, Sequence, Tuple

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ENV_LOG_LEVEL = "JUPITER_LOG_LEVEL"
ENV_LOG_COLOR = "JUPITER_LOG_COLOR"

# Rendered first, in this order. Other extras follow alphabetically.
FOCUS_KEYS: Tuple[str, ...] = (
    "phase",
    "step",
    "status",
    "result",
    "family",
    "operation",
    "index",
    "tags",
    "method",
    "url",
    "status_code",
    "error",
)

_LEVEL_COLOURS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[95m",
}
_RESET = "\033[0m"

_STANDARD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__) | {"message", "asctime", "taskName"}

_configured = False


class RelayLoggerAdapter(LoggerAdapter):
    """Logger adapter whose bound context is merged with per-call ``extra``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        merged = dict(self.extra or {})
        merged.update(kwargs.get("extra") or {})
        kwargs["extra"] = {key: value for key, value in merged.items() if value is not None}
        return msg, kwargs


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + ", ".join(_render(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    if isinstance(value, float):
        return f"{value:.4g}"
    return str(value)


def _structured_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_") and value is not None
    }
    for key in FOCUS_KEYS:
        if key in fields:
            yield key, fields.pop(key)
    yield from sorted(fields.items())


class StructuredLogFormatter(logging.Formatter):
    """Append ``key=value`` extras to each line, optionally colouring the level name."""

    def __init__(self, *, use_color: bool = False) -> None:
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        colour = _LEVEL_COLOURS.get(record.levelno) if self.use_color else None
        if colour:
            record.levelname = f"{colour}{levelname}{_RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = levelname

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = " ".join(f"{key}={_render(value)}" for key, value in _structured_fields(record))
        return f"{line} | {extras}" if extras else line


def _level_from(level: Optional[int | str]) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.getenv(ENV_LOG_LEVEL) or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _wants_colour(stream: Any) -> bool:
    preference = (os.getenv(ENV_LOG_COLOR) or "").strip().lower()
    if preference in {"1", "true", "yes", "on"}:
        return True
    if preference in {"0", "false", "no", "off"}:
        return False
    return bool(getattr(stream, "isatty", lambda: False)())


def configure_logging(level: Optional[int | str] = None, *, force: bool = False) -> None:
    """
    Install the structured stderr handler on the root logger once per process.

    Parameters
    ----------
    level:
        Logging level override. Falls back to ``JUPITER_LOG_LEVEL`` or ``INFO``.
    force:
        Replace an existing configuration instead of keeping it.
    """

    global _configured
    if _configured and not force:
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(StructuredLogFormatter(use_color=_wants_colour(handler.stream)))
    logging.basicConfig(level=_level_from(level), handlers=[handler], force=force)
    _configured = True


def get_logger(
    name: str,
    *,
    level: Optional[int | str] = None,
    tags: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> RelayLoggerAdapter:
    """
    Return a :class:`RelayLoggerAdapter` bound to ``tags`` and ``extra``.

    Parameters
    ----------
    name:
        Logger namespace, typically ``__name__``.
    level:
        Optional per-logger level override.
    tags:
        Observability tags rendered as ``tags=[...]``.
    extra:
        Context fields attached to every record, e.g. ``{"family": "swap"}``.
    """

    configure_logging()
    base: Logger = logging.getLogger(name)
    if level is not None:
        base.setLevel(_level_from(level))
    context: MutableMapping[str, object] = {}
    if tags:
        context["tags"] = tuple(tags)
    if extra:
        context.update({key: value for key, value in extra.items() if value is not None})
    return RelayLoggerAdapter(base, context)


def bind_tags(logger: LoggerAdapter, tags: Sequence[str]) -> RelayLoggerAdapter:
    """Return a new adapter with ``tags`` appended to the existing ones, without duplicates."""

    context = dict(logger.extra or {})
    context["tags"] = tuple(dict.fromkeys((*context.get("tags", ()), *tags)))
    return RelayLoggerAdapter(logger.logger, context)


def log_progress(
    logger: LoggerAdapter | Logger,
    message: str,
    *,
    phase: Optional[str] = None,
    step: Optional[str] = None,
    status: Optional[str] = None,
    result: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Mapping[str, object]] = None,
) -> None:
    """Log ``message`` with the batch progress fields that are set."""

    fields = dict(extra or {})
    fields.update({key: value for key, value in (("phase", phase), ("step", step), ("status", status), ("result", result)) if value})
    logger.log(level, message, extra=fields)


def log_separator(
    logger: LoggerAdapter | Logger,
    *,
    title: Optional[str] = None,
    level: int = logging.INFO,
    char: str = "-",
    width: int = 72,
) -> None:
    """Log a rule line, with ``title`` centred in it, marking the start of a batch."""

    width = max(16, width)
    label = f" {title.strip()} " if title else ""
    line = label.center(width, char) if len(label) < width else label
    logger.log(level, line, extra={"separator": title or True})
