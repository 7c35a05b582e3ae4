"""Clock text formatting with a coloured sub-second fraction.

This module stays free of Qt types so it can be exercised with fixed instants.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from floating_clock.clock_state import DEFAULT_FRACTION_COLOR, Precision, Rgba

# One Gregorian cycle: 400 years, 146097 days. Shifting by it keeps the calendar and time of day.
_GREGORIAN_CYCLE_SECONDS = 146097 * 86400


@dataclass(frozen=True)
class StyleSpan:
    start: int
    end: int
    color: Rgba


@dataclass(frozen=True)
class StyledText:
    text: str
    spans: Tuple[StyleSpan, ...] = ()

    @property
    def fraction(self) -> str:
        dot_index = self.text.rfind(".")
        if dot_index < 0:
            return ""
        return self.text[dot_index + 1 :]

    def __str__(self) -> str:
        return self.text


def _fraction_digits(millisecond: int, precision: Precision) -> str:
    # Floor division only: 999 ms must read 99, never 100.
    if precision is Precision.DECISECOND:
        return f"{millisecond // 100:d}"
    return f"{millisecond // 10:02d}"


def style_fraction(display: str, color: Rgba) -> StyledText:
    """Attach a colour span covering everything after the last '.' in ``display``."""
    dot_index = display.rfind(".")
    if 0 <= dot_index < len(display) - 1:
        return StyledText(display, (StyleSpan(dot_index + 1, len(display), color),))
    return StyledText(display)


def _fold_into_supported_range(seconds: int) -> int:
    """Map epoch seconds outside 1970..2770 into 1970..2370, the range datetime handles everywhere."""
    if 0 <= seconds < 2 * _GREGORIAN_CYCLE_SECONDS:
        return seconds
    return seconds % _GREGORIAN_CYCLE_SECONDS


def format_clock_text(
    now_millis: int,
    offset_millis: int,
    precision: Precision,
    fraction_color: Rgba = DEFAULT_FRACTION_COLOR,
) -> StyledText:
    """Return ``HH:MM:SS.f`` for the local wall-clock reading ``now_millis + offset_millis``.

    ``now_millis`` is milliseconds since the Unix epoch. Calendar fields come from the
    local timezone; the offset is applied as a plain millisecond delta.
    """
    adjusted = int(now_millis) + int(offset_millis)
    seconds, millisecond = divmod(adjusted, 1000)
    moment = datetime.fromtimestamp(_fold_into_supported_range(seconds))
    base = f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    display = f"{base}.{_fraction_digits(millisecond, precision)}"
    return style_fraction(display, fraction_color)
