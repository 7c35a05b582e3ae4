from __future__ import annotations

import os
import sys
from typing import Optional

from PyQt6.QtWidgets import QApplication

from floating_clock.clock_state import Position
from floating_clock.clock_window import ClockWindow, QtScheduler
from floating_clock.debug_config import DEV_MODE_ENV_VAR, DEBUG_CONFIG_ENABLED, resolve_troubleshooting
from floating_clock.engine import OVERLAY_STOPPED_EVENT, OverlayClockEngine, configure_overlay_logger
from floating_clock.logging_utils import (
    build_rotating_file_handler,
    replay_log_buffer,
    resolve_logs_dir,
    start_log_buffer,
)
from floating_clock.settings import resolve_settings

_LAUNCHER_LOGGER_NAME = "Launcher"


def main(argv: Optional[list[str]] = None) -> int:
    startup_buffer = start_log_buffer(configure_overlay_logger(DEBUG_CONFIG_ENABLED))
    settings, settings_path = resolve_settings(argv)
    troubleshooting = resolve_troubleshooting(settings.log_retention, debug_flag=settings.debug)
    overlay_logger = configure_overlay_logger(troubleshooting.debug_logging)
    logger = overlay_logger.getChild(_LAUNCHER_LOGGER_NAME)
    log_dir = resolve_logs_dir()
    file_handler = build_rotating_file_handler(log_dir, retention=troubleshooting.log_retention)
    overlay_logger.addHandler(file_handler)
    replay_log_buffer(overlay_logger, startup_buffer, file_handler)
    if not DEBUG_CONFIG_ENABLED and not settings.debug:
        logger.debug("Debug logging disabled. Export %s=1 or pass --debug to enable it.", DEV_MODE_ENV_VAR)

    logger.info("Starting floating clock (pid=%s)", os.getpid())
    logger.debug(
        "Loaded settings from %s: offset=%dms precision=%s position=(%d, %d) retention=%d log_dir=%s",
        settings_path,
        settings.offset_millis,
        settings.precision,
        settings.initial_x,
        settings.initial_y,
        troubleshooting.log_retention,
        log_dir,
    )

    app = QApplication(sys.argv[:1])
    window = ClockWindow()
    scheduler = QtScheduler(window)

    def _handle_lifecycle(event_name: str) -> None:
        logger.info("Lifecycle event: %s", event_name)
        if event_name == OVERLAY_STOPPED_EVENT:
            window.close()
            app.quit()

    engine = OverlayClockEngine(
        after=scheduler.after,
        after_cancel=scheduler.after_cancel,
        on_lifecycle_event=_handle_lifecycle,
        initial_position=Position(settings.initial_x, settings.initial_y),
    )
    engine.attach_surface(window)
    engine.start(**settings.configuration())
    window.show()

    exit_code = app.exec()
    engine.shutdown()
    logger.info("Floating clock exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
