"""Drag-to-reposition state machine for the clock overlay.

Kept free of Qt types; the surface forwards pointer events with global coordinates
and the engine injects the callables used to move the surface and dismiss it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from floating_clock.clock_state import ClockState, Position


class PointerAction(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerEvent:
    action: PointerAction
    x: int
    y: int
    on_dismiss_control: bool = False

    @property
    def point(self) -> Position:
        return Position(int(self.x), int(self.y))


@dataclass(frozen=True)
class DragSession:
    anchor_position: Position
    anchor_pointer: Position

    def position_for(self, pointer: Position) -> Position:
        return self.anchor_position + (pointer - self.anchor_pointer)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def _noop_log(message: str, *args: object) -> None:
    return None


class DragController:
    """Translates pointer events into ClockState position updates."""

    def __init__(
        self,
        state: ClockState,
        *,
        move_fn: Callable[[Position], None],
        dismiss_fn: Callable[[], None],
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        self._state = state
        self._move = move_fn
        self._dismiss = dismiss_fn
        self._log = log_fn or _noop_log
        self._session: Optional[DragSession] = None

    @property
    def drag_state(self) -> DragState:
        return DragState.IDLE if self._session is None else DragState.DRAGGING

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    def handle(self, event: PointerEvent) -> bool:
        """Process one pointer event and return True when it was consumed."""
        if event.action is PointerAction.DOWN:
            if event.on_dismiss_control:
                self._session = None
                self._log("Dismiss control pressed at (%d, %d)", event.x, event.y)
                self._dismiss()
                return True
            self._session = DragSession(anchor_position=self._state.position, anchor_pointer=event.point)
            self._log(
                "Drag initiated at pos=(%d, %d) pointer=(%d, %d)",
                self._state.position.x,
                self._state.position.y,
                event.x,
                event.y,
            )
            return True
        session = self._session
        if session is None:
            return False
        if event.action is PointerAction.MOVE:
            position = session.position_for(event.point)
            self._state.move_to(position)
            self._move(position)
            return True
        self._session = None
        self._log(
            "Drag finished (%s); overlay pos=(%d, %d)",
            event.action.value,
            self._state.position.x,
            self._state.position.y,
        )
        return True

    def cancel(self) -> None:
        if self._session is not None:
            self._session = None
            self._log("Drag session discarded")
