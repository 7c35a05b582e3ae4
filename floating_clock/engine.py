"""Overlay clock engine: owns the clock state, refresh loop and drag controller."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Union

from floating_clock.clock_state import ClockState, ColorLike, Position, Precision
from floating_clock.debug_config import DEBUG_CONFIG_ENABLED
from floating_clock.drag_controller import DragController, PointerEvent
from floating_clock.formatter import StyledText, format_clock_text
from floating_clock.logging_utils import ReleaseLogLevelFilter, propagation_requested, resolve_log_level
from floating_clock.refresh_loop import AfterCancelFn, AfterFn, RefreshLoop
from floating_clock.surface import PresentationSurface, SurfaceUnavailableError

_LOGGER_NAME = "FloatingClock.Overlay"
_OVERLAY_LOGGER = logging.getLogger(_LOGGER_NAME)
_OVERLAY_LOGGER.setLevel(resolve_log_level(DEBUG_CONFIG_ENABLED))
_OVERLAY_LOGGER.propagate = False
# Opt-in propagation flag for environments/tests that want overlay logs upstream.
if propagation_requested():
    _OVERLAY_LOGGER.propagate = True
_RELEASE_FILTER = ReleaseLogLevelFilter(release_mode=not DEBUG_CONFIG_ENABLED)
_OVERLAY_LOGGER.addFilter(_RELEASE_FILTER)

OVERLAY_STOPPED_EVENT = "overlay_stopped"


def configure_overlay_logger(debug_enabled: bool) -> logging.Logger:
    """Re-apply level and release filter once the launcher knows about ``--debug``."""
    global _RELEASE_FILTER
    _OVERLAY_LOGGER.setLevel(resolve_log_level(debug_enabled))
    _OVERLAY_LOGGER.removeFilter(_RELEASE_FILTER)
    _RELEASE_FILTER = ReleaseLogLevelFilter(release_mode=not debug_enabled)
    _OVERLAY_LOGGER.addFilter(_RELEASE_FILTER)
    return _OVERLAY_LOGGER


def _system_time_millis() -> int:
    return time.time_ns() // 1_000_000


class OverlayClockEngine:
    """Pushes the offset clock to a presentation surface on a precision-derived cadence."""

    def __init__(
        self,
        surface: Optional[PresentationSurface] = None,
        *,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        time_source: Callable[[], int] = _system_time_millis,
        on_lifecycle_event: Optional[Callable[[str], None]] = None,
        initial_position: Optional[Position] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or _OVERLAY_LOGGER
        self._time = time_source
        self._on_lifecycle_event = on_lifecycle_event
        self.state = ClockState()
        if initial_position is not None:
            self.state.move_to(initial_position)
        self.loop = RefreshLoop(
            self.tick,
            interval_ms=self.state.refresh_interval_ms,
            after=after,
            after_cancel=after_cancel,
            logger=self._logger.debug,
        )
        self.drag = DragController(
            self.state,
            move_fn=self._move_surface,
            dismiss_fn=self.shutdown,
            log_fn=self._logger.debug,
        )
        self._surface: Optional[PresentationSurface] = None
        self._surface_failing = False
        self._shut_down = False
        self.last_text: Optional[StyledText] = None
        self.paint_count = 0
        if surface is not None:
            self.attach_surface(surface)

    @property
    def surface(self) -> Optional[PresentationSurface]:
        return self._surface

    @property
    def running(self) -> bool:
        return self.loop.running

    def attach_surface(self, surface: PresentationSurface) -> None:
        self._surface = surface
        self._surface_failing = False
        surface.on_dismiss_requested(lambda: self._dismiss_from(surface))
        surface.on_pointer_event(lambda event: self._pointer_from(surface, event))
        self._move_surface(self.state.position)
        self._push(lambda target: target.render_label(self.state.display_label))
        if self.last_text is not None:
            snapshot = self.last_text
            self._push(lambda target: target.render_text(snapshot))
        self._logger.debug("Presentation surface attached: %s", type(surface).__name__)

    def detach_surface(self) -> None:
        if self._surface is None:
            return
        self.drag.cancel()
        self._surface = None
        self._logger.debug("Presentation surface detached")

    def start(
        self,
        *,
        offset_millis: Optional[int] = None,
        label: Optional[str] = None,
        precision: Optional[Union[str, Precision]] = None,
        fraction_color: Optional[ColorLike] = None,
    ) -> None:
        """Apply configuration, paint immediately and (re)start the refresh loop."""
        self._shut_down = False
        self._apply(offset_millis=offset_millis, label=label, precision=precision, fraction_color=fraction_color)
        self.tick()
        self.loop.start(self.state.refresh_interval_ms)
        self._logger.info(
            "Overlay clock started: offset=%dms precision=%s label=%r",
            self.state.offset_millis,
            self.state.precision.value,
            self.state.display_label,
        )

    def apply_configuration(
        self,
        *,
        offset_millis: Optional[int] = None,
        label: Optional[str] = None,
        precision: Optional[Union[str, Precision]] = None,
        fraction_color: Optional[ColorLike] = None,
    ) -> bool:
        changed = self._apply(
            offset_millis=offset_millis,
            label=label,
            precision=precision,
            fraction_color=fraction_color,
        )
        # Every reconfiguration reschedules, whether or not the precision moved.
        self.loop.reschedule(self.state.refresh_interval_ms)
        return changed

    def stop(self) -> None:
        """Stop ticking; the last painted frame stays on the surface."""
        self.loop.stop()

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        self.loop.stop()
        self.drag.cancel()
        self._logger.info("Overlay clock stopped")
        self._emit_lifecycle(OVERLAY_STOPPED_EVENT)

    def tick(self) -> None:
        styled = format_clock_text(
            self._time(),
            self.state.offset_millis,
            self.state.precision,
            self.state.fraction_color,
        )
        self.last_text = styled
        label = self.state.display_label
        if self._push(lambda target: target.render_text(styled)):
            self.paint_count += 1
        self._push(lambda target: target.render_label(label))

    def handle_pointer_event(self, event: PointerEvent) -> bool:
        return self.drag.handle(event)

    # Surfaces keep their registered callbacks; only the attached one may drive the engine.
    def _dismiss_from(self, surface: PresentationSurface) -> None:
        if surface is self._surface:
            self.shutdown()

    def _pointer_from(self, surface: PresentationSurface, event: PointerEvent) -> bool:
        if surface is not self._surface:
            return False
        return self.handle_pointer_event(event)

    def _apply(self, **config: object) -> bool:
        previous_precision = self.state.precision
        changed = self.state.apply_configuration(log_fn=self._logger.debug, **config)  # type: ignore[arg-type]
        if changed:
            self._logger.debug(
                "Configuration applied: offset=%dms precision=%s interval=%dms colour=%s label=%r",
                self.state.offset_millis,
                self.state.precision.value,
                self.state.refresh_interval_ms,
                self.state.fraction_color.to_hex(),
                self.state.display_label,
            )
        if previous_precision is not self.state.precision:
            self._logger.debug(
                "Precision changed %s -> %s",
                previous_precision.value,
                self.state.precision.value,
            )
        return changed

    def _move_surface(self, position: Position) -> None:
        self._push(lambda target: target.move_to(position.x, position.y))

    def _push(self, action: Callable[[PresentationSurface], None]) -> bool:
        surface = self._surface
        if surface is None:
            return False
        try:
            action(surface)
        except SurfaceUnavailableError as exc:
            if not self._surface_failing:
                self._surface_failing = True
                self._logger.debug("Presentation surface unavailable; skipping paint (%s)", exc)
            return False
        self._surface_failing = False
        return True

    def _emit_lifecycle(self, event_name: str) -> None:
        callback = self._on_lifecycle_event
        if callback is None:
            return
        try:
            callback(event_name)
        except Exception as exc:
            self._logger.warning("Lifecycle listener failed for %s: %s", event_name, exc)
