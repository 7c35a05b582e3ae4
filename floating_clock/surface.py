"""Presentation-surface contract the overlay engine renders into."""
from __future__ import annotations

from typing import Callable, Protocol

from floating_clock.drag_controller import PointerEvent
from floating_clock.formatter import StyledText


class SurfaceUnavailableError(RuntimeError):
    """Raised by a surface that is closed, detached or already destroyed."""


class PresentationSurface(Protocol):
    def render_text(self, styled: StyledText) -> None:
        ...

    def render_label(self, text: str) -> None:
        ...

    def move_to(self, x: int, y: int) -> None:
        ...

    def on_dismiss_requested(self, callback: Callable[[], None]) -> None:
        ...

    def on_pointer_event(self, callback: Callable[[PointerEvent], bool]) -> None:
        """Register ``callback``; it returns True when the event was consumed."""
        ...
