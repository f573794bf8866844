"""
Logging configuration for the downloader.

Provides a clean logging system with:
* ``colorlog`` level colours plus ANSI highlights for ``[CATEGORY]`` tags
* An optional plain-text log file that always captures DEBUG detail
* GitHub Actions CI support (``::warning::``, ``::error::``)
"""

import logging
import os
from pathlib import Path

import colorlog

log = logging.getLogger("multifile-downloader")

_CONSOLE_FMT = "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s"
_FILE_LOG_FMT = "%(asctime)s [%(levelname)s] %(message)s"
_FILE_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LOG_COLORS = {
    "DEBUG":    "cyan",
    "INFO":     "green",
    "WARNING":  "yellow",
    "ERROR":    "red",
    "CRITICAL": "bold_red",
}

# True when running inside GitHub Actions
_CI: bool = os.environ.get("GITHUB_ACTIONS") == "true"

# ── Category colours ───────────────────────────────────────────────
_ANSI_RESET = "\033[0m"
_CATEGORY_STYLES: dict[str, str] = {
    "[AUTH]":      "\033[1;36m",
    "[PAGE]":      "\033[1;34m",
    "[FILE]":      "\033[37m",
    "[SAVE]":      "\033[1;32m",
    "[ERR]":       "\033[1;31m",
    "[SKIP]":      "\033[90m",
    "[RENAME]":    "\033[1;35m",
    "[CHECK]":     "\033[33m",
    "[COLLISION]": "\033[1;33m",
}


def _apply_category_styles(msg: str) -> str:
    """Inject ANSI colours for known ``[CATEGORY]`` tags in *msg*."""
    for tag, style in _CATEGORY_STYLES.items():
        if tag in msg:
            msg = msg.replace(tag, f"{style}{tag}{_ANSI_RESET}")
    return msg


# ── Formatters ─────────────────────────────────────────────────────

class _CategoryFormatter(colorlog.ColoredFormatter):
    """Extends ``colorlog.ColoredFormatter`` to also highlight inline
    ``[CATEGORY]`` tags."""

    def format(self, record: logging.LogRecord) -> str:
        return _apply_category_styles(super().format(record))


class _CIFormatter(logging.Formatter):
    """Formatter for GitHub Actions CI environments.

    Emits ``::warning::`` / ``::error::`` workflow commands so that
    warnings and errors appear as annotations in the Actions UI.
    """

    _CI_COMMANDS: dict[int, str] = {
        logging.WARNING:  "::warning::",
        logging.ERROR:    "::error::",
        logging.CRITICAL: "::error::",
    }

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        prefix = self._CI_COMMANDS.get(record.levelno, "")
        if prefix:
            return f"{prefix}{formatted}"
        return formatted


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Configure the package logger.

    Parameters
    ----------
    debug : bool
        Enable DEBUG-level console output (default is INFO).
    log_file : str | None
        If given, also write log messages to this file path.
    """
    log.setLevel(logging.DEBUG if (debug or log_file) else logging.INFO)
    log.handlers.clear()
    log.propagate = False

    if _CI:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_CIFormatter(_FILE_LOG_FMT, datefmt="%H:%M:%S"))
    else:
        handler = colorlog.StreamHandler()
        handler.setFormatter(_CategoryFormatter(
            _CONSOLE_FMT, datefmt="%H:%M:%S", log_colors=_LOG_COLORS,
        ))
    handler.setLevel(logging.DEBUG if debug else logging.INFO)
    log.addHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_LOG_FMT, datefmt=_FILE_LOG_DATEFMT))
        log.addHandler(fh)
        log.info("Logging to file: %s", log_path.resolve())
