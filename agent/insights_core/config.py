"""
Paths, logging setup, log truncation, safe_print.
"""

import os
import sys
import logging
from pathlib import Path

from .constants import (
    INSTALL_DIR_NAME, CRED_FILE_NAME, LOCK_FILE_NAME, LOG_FILE_NAME,
    LOG_MAX_BYTES, PULSE_API_URL, STDIN_DEADLINE_SEC,
)
from .errors import InstallDirError


log = logging.getLogger("insights")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


# ─── Paths ───────────────────────────────────────────────────────
# One install dir per user per machine, shared by every editor window.

def get_install_dir():
    """Resolve and create the install dir. Raises InstallDirError."""
    override = os.environ.get("ACTIVITY_INSIGHTS_HOME")
    try:
        install_dir = Path(override) if override else Path.home() / INSTALL_DIR_NAME
    except (RuntimeError, KeyError) as e:
        raise InstallDirError(f"Can't find the home directory: {e}") from e

    try:
        install_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallDirError(f"Can't create {install_dir}: {e}") from e
    return install_dir


def credentials_file(install_dir):
    return Path(install_dir) / CRED_FILE_NAME


def lock_file(install_dir):
    return Path(install_dir) / LOCK_FILE_NAME


def log_file(install_dir):
    return Path(install_dir) / LOG_FILE_NAME


def pulse_api_url():
    return os.environ.get("ACTIVITY_INSIGHTS_PULSE_URL") or PULSE_API_URL


def stdin_deadline():
    """Seconds allowed for the editor to deliver the batch."""
    raw = os.environ.get("ACTIVITY_INSIGHTS_STDIN_DEADLINE")
    if not raw:
        return STDIN_DEADLINE_SEC
    try:
        seconds = float(raw)
    except ValueError:
        log.warning("Ignoring invalid ACTIVITY_INSIGHTS_STDIN_DEADLINE=%r", raw)
        return STDIN_DEADLINE_SEC
    return seconds if seconds > 0 else STDIN_DEADLINE_SEC


# ─── Safe print (no crash when stdio is closed) ──────────────────

def safe_print(*args, **kwargs):
    kwargs.setdefault("file", sys.stderr)
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

def setup_logging(install_dir, level=logging.INFO):
    """File log in the install dir, warnings mirrored to stderr.

    stdout is left alone: it belongs to the editor that spawned us.
    Raises InstallDirError if the log file can't be opened.
    """
    try:
        file_handler = logging.FileHandler(log_file(install_dir), encoding="utf-8")
    except OSError as e:
        raise InstallDirError(f"Can't open the log file in {install_dir}: {e}") from e
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.addHandler(file_handler)
    log.addHandler(console_handler)
    log.setLevel(level)
    log.propagate = False
    return file_handler


def truncate_log_if_large(install_dir, max_bytes=LOG_MAX_BYTES):
    """Called once at process end. Returns True if the log was emptied."""
    path = log_file(install_dir)
    try:
        if path.exists() and path.stat().st_size > max_bytes:
            for handler in log.handlers:
                handler.flush()
            path.write_text("", encoding="utf-8")
            return True
    except OSError as e:
        safe_print(f"Could not truncate {path}: {e}")
    return False
