from __future__ import annotations

import json

from floating_clock import settings as module
from floating_clock.settings import ClockSettings


def test_missing_file_yields_defaults(tmp_path) -> None:
    settings, path = module.resolve_settings(["--settings", str(tmp_path / "absent.json")], env={})
    assert settings == ClockSettings()
    assert path == (tmp_path / "absent.json").resolve()


def test_malformed_file_yields_defaults(tmp_path) -> None:
    path = tmp_path / "clock_settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert module.load_settings_file(path) == {}
    path.write_text("[1, 2]", encoding="utf-8")
    assert module.load_settings_file(path) == {}


def test_file_values_are_loaded_and_bad_types_ignored(tmp_path) -> None:
    path = tmp_path / "clock_settings.json"
    payload = {
        "offset_millis": 1234,
        "label": "NTP",
        "precision": "decisecond",
        "fraction_color": "#00FF00",
        "initial_x": "left",
        "initial_y": 40,
        "log_retention": 99,
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    settings = module.settings_from_mapping(module.load_settings_file(path))

    assert settings.offset_millis == 1234
    assert settings.label == "NTP"
    assert settings.precision == "decisecond"
    assert settings.fraction_color == "#00FF00"
    assert settings.initial_x == 0
    assert settings.initial_y == 40
    assert settings.log_retention == 20


def test_env_overrides_file(tmp_path) -> None:
    path = tmp_path / "clock_settings.json"
    path.write_text(json.dumps({"offset_millis": 5, "label": "file"}), encoding="utf-8")
    env = {
        "FLOATING_CLOCK_SETTINGS": str(path),
        "FLOATING_CLOCK_OFFSET_MS": "-250",
        "FLOATING_CLOCK_LABEL": "env",
        "FLOATING_CLOCK_PRECISION": "decisecond",
        "FLOATING_CLOCK_FRACTION_COLOR": "#112233",
    }

    settings, resolved = module.resolve_settings([], env=env)

    assert resolved == path.resolve()
    assert settings.offset_millis == -250
    assert settings.label == "env"
    assert settings.precision == "decisecond"
    assert settings.fraction_color == "#112233"


def test_unparseable_env_offset_is_ignored() -> None:
    settings = module.apply_env_overrides(ClockSettings(offset_millis=7), {"FLOATING_CLOCK_OFFSET_MS": "soon"})
    assert settings.offset_millis == 7


def test_cli_overrides_env(tmp_path) -> None:
    argv = [
        "--settings",
        str(tmp_path / "absent.json"),
        "--offset",
        "900",
        "--precision",
        "bogus",
        "--x",
        "15",
        "--y",
        "25",
        "--debug",
    ]
    settings, _ = module.resolve_settings(argv, env={"FLOATING_CLOCK_OFFSET_MS": "1"})

    assert settings.offset_millis == 900
    assert settings.precision == "bogus"
    assert (settings.initial_x, settings.initial_y) == (15, 25)
    assert settings.debug is True


def test_configuration_kwargs() -> None:
    settings = ClockSettings(offset_millis=3, label="x", precision="decisecond", fraction_color=0xFF00FF00)
    assert settings.configuration() == {
        "offset_millis": 3,
        "label": "x",
        "precision": "decisecond",
        "fraction_color": 0xFF00FF00,
    }
