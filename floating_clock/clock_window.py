"""PyQt6 presentation surface for the floating clock."""
from __future__ import annotations

import html
import logging
from typing import Callable, List, Optional, Set

from PyQt6 import sip
from PyQt6.QtCore import QPoint, QRectF, Qt, QTimer
from PyQt6.QtGui import QColor, QFont, QPainter
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QWidget

from floating_clock.drag_controller import PointerAction, PointerEvent
from floating_clock.formatter import StyledText
from floating_clock.surface import SurfaceUnavailableError

_WINDOW_LOGGER = logging.getLogger("FloatingClock.Overlay.Window")

_PANEL_COLOR = QColor(0, 0, 0, 0x88)
_PANEL_RADIUS = 8.0
_LABEL_MAX_WIDTH = 120
_CLOSE_SIZE = 28


def styled_text_html(styled: StyledText) -> str:
    """Render styled text as Qt rich text; span alpha is dropped."""
    parts: List[str] = []
    cursor = 0
    for span in styled.spans:
        parts.append(html.escape(styled.text[cursor : span.start]))
        color = span.color
        parts.append(
            '<span style="color:#{:02x}{:02x}{:02x}">{}</span>'.format(
                color.red,
                color.green,
                color.blue,
                html.escape(styled.text[span.start : span.end]),
            )
        )
        cursor = span.end
    parts.append(html.escape(styled.text[cursor:]))
    return "".join(parts)


class QtScheduler:
    """``after``/``after_cancel`` pair backed by single-shot QTimers."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        self._parent = parent
        self._timers: Set[QTimer] = set()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)

        def _fire() -> None:
            self._release(timer)
            callback()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(delay_ms)))
        return timer

    def after_cancel(self, handle: object) -> None:
        if isinstance(handle, QTimer) and handle in self._timers:
            handle.stop()
            self._release(handle)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def _release(self, timer: QTimer) -> None:
        self._timers.discard(timer)
        timer.deleteLater()


class ClockWindow(QWidget):
    """Frameless always-on-top panel with an alias label, the time and a close control."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setWindowTitle("Floating Clock")

        self._label_view = QLabel(self)
        self._label_view.setStyleSheet("color: white;")
        label_font = QFont(self._label_view.font())
        label_font.setPointSize(9)
        self._label_view.setFont(label_font)
        self._label_view.setMaximumWidth(_LABEL_MAX_WIDTH)
        self._label_view.setVisible(False)

        self._time_view = QLabel(self)
        self._time_view.setTextFormat(Qt.TextFormat.RichText)
        self._time_view.setStyleSheet("color: white;")
        time_font = QFont("monospace")
        time_font.setStyleHint(QFont.StyleHint.Monospace)
        time_font.setBold(True)
        time_font.setPointSize(16)
        self._time_view.setFont(time_font)

        self._close_view = QLabel("✕", self)
        self._close_view.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._close_view.setFixedSize(_CLOSE_SIZE, _CLOSE_SIZE)
        self._close_view.setStyleSheet(
            "color: white; background-color: rgba(255, 68, 68, 153); border-radius: %dpx;" % (_CLOSE_SIZE // 2)
        )

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 6, 8, 6)
        layout.setSpacing(8)
        layout.addWidget(self._label_view)
        layout.addWidget(self._time_view, 1)
        layout.addWidget(self._close_view, 0, Qt.AlignmentFlag.AlignVCenter)

        # Children stay transparent so the panel sees every press and can hit-test the close control.
        for child in (self._label_view, self._time_view, self._close_view):
            child.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)

        self._dismiss_callbacks: List[Callable[[], None]] = []
        self._pointer_callbacks: List[Callable[[PointerEvent], bool]] = []
        self._closed = False

    # Presentation surface contract -------------------------------------

    def render_text(self, styled: StyledText) -> None:
        self._ensure_available()
        self._time_view.setText(styled_text_html(styled))

    def render_label(self, text: str) -> None:
        self._ensure_available()
        if self._label_view.text() != text:
            self._label_view.setText(text)
        self._label_view.setVisible(bool(text))

    def move_to(self, x: int, y: int) -> None:
        self._ensure_available()
        self.move(int(x), int(y))

    def on_dismiss_requested(self, callback: Callable[[], None]) -> None:
        self._dismiss_callbacks.append(callback)

    def on_pointer_event(self, callback: Callable[[PointerEvent], bool]) -> None:
        self._pointer_callbacks.append(callback)

    # Qt events -----------------------------------------------------------

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(_PANEL_COLOR)
        painter.drawRoundedRect(QRectF(self.rect()), _PANEL_RADIUS, _PANEL_RADIUS)
        painter.end()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            local = event.position().toPoint()
            on_close = self._close_view.geometry().contains(local)
            if self._forward(event, PointerAction.DOWN, on_dismiss_control=on_close):
                return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._forward(event, PointerAction.MOVE):
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton and self._forward(event, PointerAction.UP):
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Escape:
            self.request_dismiss()
            event.accept()
            return
        super().keyPressEvent(event)

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._dispatch(PointerEvent(PointerAction.CANCEL, self.x(), self.y()))
        super().hideEvent(event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._closed = True
        _WINDOW_LOGGER.debug("Clock window closed")
        super().closeEvent(event)

    # Helpers -------------------------------------------------------------

    def request_dismiss(self) -> None:
        _WINDOW_LOGGER.debug("Dismiss requested")
        for callback in list(self._dismiss_callbacks):
            callback()

    @property
    def time_html(self) -> str:
        return self._time_view.text()

    @property
    def label_text(self) -> str:
        return self._label_view.text()

    @property
    def label_shown(self) -> bool:
        return not self._label_view.isHidden()

    @property
    def close_control_center(self) -> QPoint:
        return self._close_view.geometry().center()

    def _forward(self, event, action: PointerAction, *, on_dismiss_control: bool = False) -> bool:
        point = event.globalPosition().toPoint()
        pointer = PointerEvent(action, point.x(), point.y(), on_dismiss_control=on_dismiss_control)
        if self._dispatch(pointer):
            event.accept()
            return True
        return False

    def _dispatch(self, pointer: PointerEvent) -> bool:
        consumed = False
        for callback in list(self._pointer_callbacks):
            if callback(pointer):
                consumed = True
        return consumed

    def _ensure_available(self) -> None:
        if self._closed or sip.isdeleted(self):
            raise SurfaceUnavailableError("clock window is closed")
