from __future__ import annotations

import os

import pytest

from floating_clock.clock_state import Rgba
from floating_clock.clock_window import styled_text_html
from floating_clock.formatter import StyleSpan, StyledText


def test_styled_text_html_colours_fraction_only() -> None:
    styled = StyledText("12:34:56.78", (StyleSpan(9, 11, Rgba(0xC6, 0x28, 0x28)),))
    assert styled_text_html(styled) == '12:34:56.<span style="color:#c62828">78</span>'


def test_styled_text_html_escapes_text() -> None:
    assert styled_text_html(StyledText("<b>&")) == "&lt;b&gt;&amp;"


@pytest.fixture
def qt_app(monkeypatch):
    monkeypatch.setenv("QT_QPA_PLATFORM", os.getenv("QT_QPA_PLATFORM", "offscreen"))
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def window(qt_app):
    from floating_clock.clock_window import ClockWindow

    win = ClockWindow()
    yield win
    win.close()


@pytest.mark.pyqt_required
def test_window_renders_text_label_and_position(window) -> None:
    styled = StyledText("00:00:00.0", (StyleSpan(9, 10, Rgba(0, 255, 0)),))
    window.render_text(styled)
    window.render_label("NTP")
    window.move_to(40, 60)

    assert "#00ff00" in window.time_html
    assert window.label_text == "NTP"
    assert (window.x(), window.y()) == (40, 60)


@pytest.mark.pyqt_required
def test_closed_window_reports_unavailable(window) -> None:
    from floating_clock.surface import SurfaceUnavailableError

    window.close()
    with pytest.raises(SurfaceUnavailableError):
        window.render_text(StyledText("12:00:00.00"))
    with pytest.raises(SurfaceUnavailableError):
        window.move_to(0, 0)


@pytest.mark.pyqt_required
def test_dismiss_request_notifies_callbacks(window) -> None:
    calls: list[str] = []
    window.on_dismiss_requested(lambda: calls.append("dismiss"))
    window.request_dismiss()
    assert calls == ["dismiss"]


@pytest.mark.pyqt_required
def test_scheduler_cancel_stops_timer(qt_app) -> None:
    from floating_clock.clock_window import QtScheduler

    scheduler = QtScheduler()
    handle = scheduler.after(1000, lambda: None)
    assert scheduler.pending == 1
    assert handle.isActive() is True
    scheduler.after_cancel(handle)
    assert scheduler.pending == 0
    scheduler.after_cancel(object())


@pytest.mark.pyqt_required
def test_empty_label_stays_hidden(window) -> None:
    assert window.label_shown is False
    window.render_label("")
    assert window.label_shown is False
    window.render_label("alias")
    assert window.label_shown is True
    window.render_label("")
    assert window.label_shown is False


def _press_and_collect(qt_app, window, point):
    from PyQt6.QtCore import Qt
    from PyQt6.QtTest import QTest

    seen: list = []
    window.on_pointer_event(lambda event: seen.append(event) or True)
    window.show()
    qt_app.processEvents()
    QTest.mousePress(window, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, point)
    return seen


@pytest.mark.pyqt_required
def test_press_on_close_control_flags_dismiss(qt_app, window) -> None:
    window.show()
    qt_app.processEvents()
    seen = _press_and_collect(qt_app, window, window.close_control_center)

    assert [event.action.value for event in seen] == ["down"]
    assert seen[0].on_dismiss_control is True


@pytest.mark.pyqt_required
def test_press_on_panel_body_starts_drag_not_dismiss(qt_app, window) -> None:
    from PyQt6.QtCore import QPoint

    seen = _press_and_collect(qt_app, window, QPoint(2, 2))

    assert [event.action.value for event in seen] == ["down"]
    assert seen[0].on_dismiss_control is False
