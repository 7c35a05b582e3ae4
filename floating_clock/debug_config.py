"""Dev-mode detection and troubleshooting options for the clock overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEV_MODE_ENV_VAR = "FLOATING_CLOCK_DEV_MODE"
LOG_RETENTION_DEFAULT = 5
LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    token = value.strip().lower()
    if token in _TRUTHY:
        return True
    if token in _FALSY:
        return False
    return None


def is_dev_build(env: Optional[Mapping[str, str]] = None) -> bool:
    source = os.environ if env is None else env
    return bool(parse_flag(source.get(DEV_MODE_ENV_VAR)))


DEBUG_CONFIG_ENABLED = is_dev_build()


@dataclass(frozen=True)
class TroubleshootingConfig:
    log_retention: int = LOG_RETENTION_DEFAULT
    debug_logging: bool = False


def coerce_log_retention(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return None
    if numeric <= 0:
        return LOG_RETENTION_MIN
    if numeric > LOG_RETENTION_MAX:
        return LOG_RETENTION_MAX
    return numeric


def resolve_troubleshooting(log_retention: Any = None, *, debug_flag: bool = False) -> TroubleshootingConfig:
    """Combine the configured retention with dev mode and the ``--debug`` flag."""
    retention = coerce_log_retention(log_retention)
    return TroubleshootingConfig(
        log_retention=LOG_RETENTION_DEFAULT if retention is None else retention,
        debug_logging=DEBUG_CONFIG_ENABLED or bool(debug_flag),
    )
