from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]
LoggerFn = Callable[..., None]


def _noop_log(message: str, *args: object) -> None:
    return None


class LoopState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class RefreshLoop:
    """Single-shot tick scheduler with explicit start/stop/reschedule transitions.

    Only one tick is ever pending. Each scheduled callback carries the generation it was
    created for, so a callback that fires after being cancelled is ignored.
    """

    def __init__(
        self,
        tick: Callable[[], None],
        *,
        interval_ms: int,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        logger: Optional[LoggerFn] = None,
    ) -> None:
        self._tick = tick
        self._after = after
        self._after_cancel = after_cancel
        self._logger = logger or _noop_log
        self._interval_ms = max(1, int(interval_ms))
        self._state = LoopState.STOPPED
        self._handle: object | None = None
        self._generation = 0
        self.tick_count = 0

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is LoopState.RUNNING

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def start(self, interval_ms: Optional[int] = None) -> None:
        restarted = self.running
        self._cancel_pending()
        if interval_ms is not None:
            self._interval_ms = max(1, int(interval_ms))
        self._state = LoopState.RUNNING
        self._schedule()
        self._log("Refresh loop %s (interval=%dms)", "restarted" if restarted else "started", self._interval_ms)

    def stop(self) -> None:
        if not self.running:
            return
        self._cancel_pending()
        self._state = LoopState.STOPPED
        self._log("Refresh loop stopped after %d ticks", self.tick_count)

    def reschedule(self, interval_ms: int) -> None:
        previous = self._interval_ms
        self._interval_ms = max(1, int(interval_ms))
        if not self.running:
            return
        self._cancel_pending()
        self._schedule()
        self._log("Refresh loop rescheduled: interval %dms -> %dms", previous, self._interval_ms)

    def _schedule(self) -> None:
        generation = self._generation
        self._handle = self._after(self._interval_ms, lambda: self._run_tick(generation))

    def _cancel_pending(self) -> None:
        self._generation += 1
        handle = self._handle
        self._handle = None
        if handle is not None:
            try:
                self._after_cancel(handle)
            except Exception:
                pass

    def _run_tick(self, generation: int) -> None:
        if not self.running or generation != self._generation:
            return
        self._handle = None
        try:
            self.tick_count += 1
            self._tick()
        finally:
            if self.running and generation == self._generation:
                self._schedule()

    def _log(self, message: str, *args: object) -> None:
        try:
            self._logger(message, *args)
        except Exception:
            pass
