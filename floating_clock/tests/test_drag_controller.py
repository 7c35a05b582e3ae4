from __future__ import annotations

import pytest

from floating_clock.clock_state import ClockState, Position
from floating_clock.drag_controller import DragController, DragSession, DragState, PointerAction, PointerEvent


def _build():
    state = ClockState(position=Position(50, 200))
    moves: list[Position] = []
    dismissed: list[bool] = []
    controller = DragController(
        state,
        move_fn=moves.append,
        dismiss_fn=lambda: dismissed.append(True),
    )
    return controller, state, moves, dismissed


def down(x: int, y: int, *, on_dismiss: bool = False) -> PointerEvent:
    return PointerEvent(PointerAction.DOWN, x, y, on_dismiss_control=on_dismiss)


def move(x: int, y: int) -> PointerEvent:
    return PointerEvent(PointerAction.MOVE, x, y)


def test_pointer_down_opens_session_and_consumes() -> None:
    controller, state, moves, _ = _build()

    assert controller.handle(down(300, 400)) is True

    assert controller.drag_state is DragState.DRAGGING
    assert controller.session == DragSession(anchor_position=Position(50, 200), anchor_pointer=Position(300, 400))
    assert moves == []


def test_move_updates_state_and_pushes_position() -> None:
    controller, state, moves, _ = _build()
    controller.handle(down(300, 400))

    assert controller.handle(move(310, 390)) is True

    assert state.position == Position(60, 190)
    assert moves == [Position(60, 190)]


@pytest.mark.parametrize(
    "path",
    [
        [(25, -40)],
        [(5, 0), (10, -10), (25, -40)],
        [(-100, 100), (0, 0), (25, -40)],
    ],
)
def test_final_position_depends_only_on_total_delta(path) -> None:
    controller, state, moves, _ = _build()
    controller.handle(down(1000, 1000))
    for dx, dy in path:
        controller.handle(move(1000 + dx, 1000 + dy))
    assert controller.handle(PointerEvent(PointerAction.UP, 1025, 960)) is True

    assert state.position == Position(75, 160)
    assert controller.drag_state is DragState.IDLE
    assert controller.session is None
    assert len(moves) == len(path)


def test_release_and_cancel_end_the_gesture_without_moving() -> None:
    controller, state, moves, _ = _build()
    controller.handle(down(0, 0))
    controller.handle(PointerEvent(PointerAction.CANCEL, 500, 500))

    assert controller.drag_state is DragState.IDLE
    assert state.position == Position(50, 200)
    assert moves == []


def test_events_while_idle_are_not_consumed() -> None:
    controller, state, moves, _ = _build()

    assert controller.handle(move(10, 10)) is False
    assert controller.handle(PointerEvent(PointerAction.UP, 10, 10)) is False
    assert controller.handle(PointerEvent(PointerAction.CANCEL, 10, 10)) is False
    assert state.position == Position(50, 200)
    assert moves == []


def test_dismiss_control_press_never_opens_session() -> None:
    controller, state, moves, dismissed = _build()

    assert controller.handle(down(90, 210, on_dismiss=True)) is True

    assert dismissed == [True]
    assert controller.session is None
    assert controller.drag_state is DragState.IDLE
    assert controller.handle(move(200, 300)) is False
    assert state.position == Position(50, 200)


def test_second_gesture_anchors_on_latest_position() -> None:
    controller, state, _, _ = _build()
    controller.handle(down(0, 0))
    controller.handle(move(10, 10))
    controller.handle(PointerEvent(PointerAction.UP, 10, 10))

    controller.handle(down(500, 500))
    controller.handle(move(495, 520))

    assert state.position == Position(55, 230)


def test_cancel_discards_open_session() -> None:
    controller, _, _, _ = _build()
    controller.handle(down(0, 0))
    controller.cancel()
    assert controller.session is None
