"""Clock configuration state: offset, label, precision, fraction colour and position."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

ColorLike = Union["Rgba", str, int]
LoggerFn = Callable[..., None]


class Precision(str, Enum):
    CENTISECOND = "centisecond"
    DECISECOND = "decisecond"


_REFRESH_INTERVALS_MS = {
    Precision.CENTISECOND: 10,
    Precision.DECISECOND: 100,
}


def refresh_interval_for(precision: Precision) -> int:
    return _REFRESH_INTERVALS_MS[precision]


def _lookup_precision(token: object) -> Optional[Precision]:
    if isinstance(token, Precision):
        return token
    if isinstance(token, str):
        cleaned = token.strip().lower()
        for candidate in Precision:
            if candidate.value == cleaned:
                return candidate
    return None


def resolve_precision(token: Optional[Union[str, Precision]]) -> Precision:
    """Map a precision token to a mode; missing or unknown tokens fall back to centisecond."""
    return _lookup_precision(token) or Precision.CENTISECOND


def is_known_precision(token: object) -> bool:
    return _lookup_precision(token) is not None


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rgba:
    red: int
    green: int
    blue: int
    alpha: int = 255

    def to_hex(self) -> str:
        if self.alpha == 255:
            return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"
        return f"#{self.alpha:02X}{self.red:02X}{self.green:02X}{self.blue:02X}"

    def to_argb(self) -> int:
        return (self.alpha << 24) | (self.red << 16) | (self.green << 8) | self.blue

    @classmethod
    def from_argb(cls, value: int) -> "Rgba":
        packed = int(value) & 0xFFFFFFFF
        return cls(
            red=(packed >> 16) & 0xFF,
            green=(packed >> 8) & 0xFF,
            blue=packed & 0xFF,
            alpha=(packed >> 24) & 0xFF,
        )


_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

DEFAULT_FRACTION_COLOR = Rgba(0xC6, 0x28, 0x28)
DEFAULT_POSITION = Position(0, 200)


def parse_color(value: ColorLike) -> Rgba:
    """Accept an Rgba, a '#RRGGBB'/'#AARRGGBB' string or a packed ARGB integer.

    Raises ValueError for anything else.
    """
    if isinstance(value, Rgba):
        return value
    if isinstance(value, bool):
        raise ValueError(f"unsupported colour value: {value!r}")
    if isinstance(value, int):
        return Rgba.from_argb(value)
    if isinstance(value, str):
        match = _HEX_COLOR.match(value.strip())
        if match is None:
            raise ValueError(f"unsupported colour value: {value!r}")
        digits = match.group(1)
        if len(digits) == 6:
            return Rgba.from_argb(0xFF000000 | int(digits, 16))
        return Rgba.from_argb(int(digits, 16))
    raise ValueError(f"unsupported colour value: {value!r}")


def _noop_log(message: str, *args: object) -> None:
    return None


@dataclass
class ClockState:
    """Mutable clock configuration owned by the overlay engine.

    ``refresh_interval_ms`` is derived from ``precision`` and is never set on its own.
    """

    offset_millis: int = 0
    label: Optional[str] = None
    precision: Precision = Precision.CENTISECOND
    fraction_color: Rgba = DEFAULT_FRACTION_COLOR
    position: Position = DEFAULT_POSITION

    @property
    def refresh_interval_ms(self) -> int:
        return refresh_interval_for(self.precision)

    @property
    def display_label(self) -> str:
        return self.label or ""

    def snapshot(self) -> tuple:
        return (self.offset_millis, self.label, self.precision, self.fraction_color, self.position)

    def apply_configuration(
        self,
        *,
        offset_millis: Optional[int] = None,
        label: Optional[str] = None,
        precision: Optional[Union[str, Precision]] = None,
        fraction_color: Optional[ColorLike] = None,
        log_fn: LoggerFn = _noop_log,
    ) -> bool:
        """Update provided fields and return True when anything observable changed.

        ``precision`` is always resolved: omitted or unrecognised tokens select centisecond.
        An invalid ``fraction_color`` leaves the current colour in place.
        """
        before = self.snapshot()
        if offset_millis is not None:
            self.offset_millis = int(offset_millis)
        if label is not None:
            self.label = str(label)
        if precision is not None and not is_known_precision(precision):
            log_fn("Unknown precision token %r; using %s", precision, Precision.CENTISECOND.value)
        self.precision = resolve_precision(precision)
        if fraction_color is not None:
            try:
                self.fraction_color = parse_color(fraction_color)
            except ValueError:
                log_fn("Ignoring invalid fraction colour %r; keeping %s", fraction_color, self.fraction_color.to_hex())
        return before != self.snapshot()

    def move_to(self, position: Position) -> None:
        self.position = position
