from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import MemoryHandler, RotatingFileHandler
from pathlib import Path
from typing import Mapping, Optional

LOG_DIR_ENV_VAR = "FLOATING_CLOCK_LOG_DIR"
PROPAGATE_ENV_VAR = "FLOATING_CLOCK_PROPAGATE_LOGS"
LOG_FILENAME = "floating-clock.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def resolve_logs_dir(log_dir_name: str = "FloatingClock", env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Resolve the directory to store overlay logs.

    Strategy:
    - Use FLOATING_CLOCK_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    source = os.environ if env is None else env
    candidates = []

    env_override = source.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(source.get("XDG_STATE_HOME") or Path.home() / ".local" / "state")
    cache_home = Path(source.get("XDG_CACHE_HOME") or Path.home() / ".cache")
    candidates.append(state_home)
    candidates.append(cache_home)
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Rotating handler keeping ``retention`` files in total (current log plus backups)."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter or logging.Formatter(LOG_FORMAT))
    return handler


def start_log_buffer(logger: logging.Logger, capacity: int = 500) -> MemoryHandler:
    """Hold records logged before the file handler exists (settings warnings, mostly)."""
    buffer = MemoryHandler(capacity, flushLevel=logging.CRITICAL + 1, flushOnClose=True)
    logger.addHandler(buffer)
    return buffer


def replay_log_buffer(logger: logging.Logger, buffer: MemoryHandler, target: logging.Handler) -> None:
    """Send buffered records to ``target`` and drop the buffer from ``logger``."""
    logger.removeHandler(buffer)
    buffer.setTarget(target)
    buffer.close()


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def propagation_requested(env: Optional[Mapping[str, str]] = None) -> bool:
    source = os.environ if env is None else env
    return source.get(PROPAGATE_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}


class ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True
