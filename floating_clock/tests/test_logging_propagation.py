from __future__ import annotations

import importlib
import logging
import sys

import pytest


@pytest.fixture(autouse=True)
def _reset_logger(monkeypatch):
    yield
    monkeypatch.delenv("FLOATING_CLOCK_PROPAGATE_LOGS", raising=False)
    if "floating_clock.engine" in sys.modules:
        del sys.modules["floating_clock.engine"]
    importlib.import_module("floating_clock.engine")


def _reload_with_env(monkeypatch, value: str | None):
    if value is None:
        monkeypatch.delenv("FLOATING_CLOCK_PROPAGATE_LOGS", raising=False)
    else:
        monkeypatch.setenv("FLOATING_CLOCK_PROPAGATE_LOGS", value)
    logging.getLogger("FloatingClock.Overlay").propagate = False
    if "floating_clock.engine" in sys.modules:
        del sys.modules["floating_clock.engine"]
    return importlib.import_module("floating_clock.engine")


def test_default_propagation_disabled(monkeypatch):
    mod = _reload_with_env(monkeypatch, None)
    assert mod._OVERLAY_LOGGER.propagate is False


def test_env_enables_propagation(monkeypatch):
    mod = _reload_with_env(monkeypatch, "1")
    assert mod._OVERLAY_LOGGER.propagate is True


def test_configure_overlay_logger_sets_level(monkeypatch):
    mod = _reload_with_env(monkeypatch, None)
    logger = mod.configure_overlay_logger(True)
    assert logger.level == logging.DEBUG
    logger = mod.configure_overlay_logger(False)
    assert logger.level == logging.INFO
