"""Clock settings resolved from a JSON file, environment overrides and CLI flags."""
from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from floating_clock.clock_state import DEFAULT_FRACTION_COLOR, DEFAULT_POSITION, Precision
from floating_clock.debug_config import LOG_RETENTION_DEFAULT, coerce_log_retention

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_SETTINGS_PATH = PACKAGE_DIR / "clock_settings.json"
SETTINGS_PATH_ENV_VAR = "FLOATING_CLOCK_SETTINGS"

_ENV_OFFSET = "FLOATING_CLOCK_OFFSET_MS"
_ENV_LABEL = "FLOATING_CLOCK_LABEL"
_ENV_PRECISION = "FLOATING_CLOCK_PRECISION"
_ENV_FRACTION_COLOR = "FLOATING_CLOCK_FRACTION_COLOR"

_LOGGER = logging.getLogger("FloatingClock.Overlay.Settings")


@dataclass(frozen=True)
class ClockSettings:
    offset_millis: int = 0
    label: Optional[str] = None
    precision: str = Precision.CENTISECOND.value
    fraction_color: Union[str, int] = DEFAULT_FRACTION_COLOR.to_hex()
    initial_x: int = DEFAULT_POSITION.x
    initial_y: int = DEFAULT_POSITION.y
    log_retention: int = LOG_RETENTION_DEFAULT
    debug: bool = False

    def configuration(self) -> Dict[str, Any]:
        """Keyword arguments for ``OverlayClockEngine.start``."""
        return {
            "offset_millis": self.offset_millis,
            "label": self.label,
            "precision": self.precision,
            "fraction_color": self.fraction_color,
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_FILE_KEY_CHECKS = {
    "offset_millis": _is_int,
    "label": lambda value: value is None or isinstance(value, str),
    "precision": lambda value: isinstance(value, str),
    "fraction_color": lambda value: isinstance(value, str) or _is_int(value),
    "initial_x": _is_int,
    "initial_y": _is_int,
}


def load_settings_file(path: Path) -> Dict[str, Any]:
    """Read the settings JSON, returning {} when missing, unreadable or malformed."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOGGER.debug("Settings file not found at %s; using defaults", path)
        return {}
    except OSError as exc:
        _LOGGER.warning("Failed to read settings file %s; using defaults (%s)", path, exc)
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Failed to parse %s; using defaults (%s)", path, exc)
        return {}
    if not isinstance(data, dict):
        _LOGGER.warning("Settings file %s is not a JSON object; using defaults", path)
        return {}
    return data


def settings_from_mapping(data: Mapping[str, Any], base: Optional[ClockSettings] = None) -> ClockSettings:
    settings = base or ClockSettings()
    updates: Dict[str, Any] = {}
    for key, check in _FILE_KEY_CHECKS.items():
        if key not in data:
            continue
        value = data[key]
        if not check(value):
            _LOGGER.warning("Ignoring invalid value for '%s': %r", key, value)
            continue
        updates[key] = value
    if "log_retention" in data:
        retention = coerce_log_retention(data["log_retention"])
        if retention is None:
            _LOGGER.warning("Ignoring invalid value for 'log_retention': %r", data["log_retention"])
        else:
            updates["log_retention"] = retention
    return replace(settings, **updates)


def apply_env_overrides(settings: ClockSettings, env: Mapping[str, str]) -> ClockSettings:
    updates: Dict[str, Any] = {}
    offset_raw = env.get(_ENV_OFFSET)
    if offset_raw is not None:
        try:
            updates["offset_millis"] = int(offset_raw.strip())
        except ValueError:
            _LOGGER.warning("Ignoring %s=%r (not an integer)", _ENV_OFFSET, offset_raw)
    if _ENV_LABEL in env:
        updates["label"] = env[_ENV_LABEL]
    if _ENV_PRECISION in env:
        updates["precision"] = env[_ENV_PRECISION]
    colour_raw = env.get(_ENV_FRACTION_COLOR)
    if colour_raw is not None:
        if colour_raw.strip():
            updates["fraction_color"] = colour_raw.strip()
        else:
            _LOGGER.warning("Ignoring empty %s", _ENV_FRACTION_COLOR)
    return replace(settings, **updates)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Always-on-top floating clock overlay")
    parser.add_argument("--settings", help="Path to a clock_settings.json file")
    parser.add_argument("--offset", type=int, dest="offset_millis", help="Milliseconds added to the system time")
    parser.add_argument("--label", help="Alias text shown beside the clock")
    parser.add_argument(
        "--precision",
        help="Sub-second precision: centisecond or decisecond (unknown values use centisecond)",
    )
    parser.add_argument("--fraction-color", dest="fraction_color", help="Colour of the sub-second digits (#RRGGBB)")
    parser.add_argument("--x", type=int, dest="initial_x", help="Initial left edge of the overlay")
    parser.add_argument("--y", type=int, dest="initial_y", help="Initial top edge of the overlay")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def resolve_settings_path(args_path: Optional[str], env: Mapping[str, str]) -> Path:
    if args_path:
        return Path(args_path).expanduser().resolve()
    env_override = env.get(SETTINGS_PATH_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser().resolve()
    return DEFAULT_SETTINGS_PATH


def resolve_settings(
    argv: Optional[Sequence[str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[ClockSettings, Path]:
    """Layer file settings, environment overrides and CLI flags, in that order."""
    source = os.environ if env is None else env
    args = build_arg_parser().parse_args(argv)
    path = resolve_settings_path(args.settings, source)
    settings = settings_from_mapping(load_settings_file(path))
    settings = apply_env_overrides(settings, source)
    cli_updates = {
        field.name: getattr(args, field.name)
        for field in fields(ClockSettings)
        if getattr(args, field.name, None) is not None and field.name != "debug"
    }
    settings = replace(settings, **cli_updates)
    if args.debug:
        settings = replace(settings, debug=True)
    return settings, path
