"""Logging setup shared by the CLI, the script wrapper and library callers.

Standard output may carry an encoded image (``cat in.png | pointillism > out.png``),
so console logging always goes to stderr and never to stdout.

Public API:
    setup_logging(log_level="INFO", log_file="run.log", json=True, context={"app": "approximate"})
    get_logger(name)
    push_context(seed=42, schedule="uniform")
    pop_context(keys=["seed"])
    install_excepthook()

Line formats:
    Console: 2026-10-19T13:45:12.345Z | INFO     | app=approximate seed=42 | Applied 100 disk(s)
    JSON:    {"t": "2026-10-19T13:45:12.345000+00:00", "lvl": "INFO", "name": "...", "msg": "...", "seed": 42}

Context fields live in a contextvar, so concurrent runs in separate threads or
tasks keep separate fields. Calling setup_logging() again replaces the
handlers it installed before instead of stacking new ones.
"""

import contextvars
import json as jsonlib
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context = contextvars.ContextVar('pointillism_log_context', default={})

# Handlers installed by the last setup_logging() call
_installed: List[logging.Handler] = []

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Render records as console lines or JSON objects, with context fields.

    Parameters
    ----------
    json_lines : bool
        Emit one JSON object per record instead of the console line
    color : bool
        Color the level name (only honoured when stderr is a terminal)
    """

    def __init__(self, json_lines: bool = False, color: bool = False):
        super().__init__()
        self.json_lines = json_lines
        self.color = color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created, tz=timezone.utc)
        fields = _context.get()

        if self.json_lines:
            payload = {
                't': when.isoformat(),
                'lvl': record.levelname,
                'name': record.name,
                'pid': os.getpid(),
                'msg': record.getMessage(),
                **fields,
            }
            if record.exc_info:
                payload['exc'] = self.formatException(record.exc_info)
            return jsonlib.dumps(payload, default=str)

        level = f"{record.levelname:8s}"
        if self.color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        stamp = when.strftime('%Y-%m-%dT%H:%M:%S.') + f"{when.microsecond // 1000:03d}Z"
        segments = [stamp, level]
        if fields:
            segments.append(' '.join(f"{k}={v}" for k, v in fields.items()))
        segments.append(record.getMessage())

        line = ' | '.join(segments)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Configure the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Also append records to this file (parents are created)
    json : bool
        JSON lines in the log file instead of console lines
    color : bool
        Colored level names on a terminal stderr
    to_stderr : bool
        Attach a stderr console handler
    capture_warnings : bool
        Route ``warnings.warn`` through logging
    quiet_libs : list[str], optional
        Loggers to raise to WARNING (e.g. ["PIL"], whose plugins chat at DEBUG)
    context : dict, optional
        Fields pushed onto the context before returning

    Returns
    -------
    dict
        {"handlers": [...]} (the handlers now attached to the root logger)
    """
    root = logging.getLogger()

    # Handlers attached by anyone else (test harnesses, embedding apps) stay
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(getattr(logging, log_level.upper()))

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter(json_lines=False, color=color))
        _installed.append(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(ContextFormatter(json_lines=json))
        _installed.append(file_handler)

    for handler in _installed:
        root.addHandler(handler)

    if context:
        push_context(**context)

    for name in quiet_libs or []:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(capture_warnings)

    return {'handlers': list(_installed)}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**fields) -> None:
    """Attach fields to every subsequent record (later values win)."""
    _context.set({**_context.get(), **fields})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Drop the named context fields, or all of them when ``keys`` is None."""
    if keys is None:
        _context.set({})
        return
    _context.set({k: v for k, v in _context.get().items() if k not in keys})


def install_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL before the interpreter exits.

    Ctrl+C keeps the default traceback-free behaviour.
    """
    def _hook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_tb)
        )

    sys.excepthook = _hook
