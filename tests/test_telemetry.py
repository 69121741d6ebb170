from __future__ import annotations

from types import SimpleNamespace
from typing import Iterator

import pytest

from jump_beacon.adapters.textual import app as demo
from jump_beacon.runtime import telemetry


class RecordingConfig:
    """Stands in for ``telelog.Config``; remembers every builder call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __getattr__(self, name: str):
        def record(*args):
            self.calls.append((name, *args))
            return self

        return record


@pytest.fixture(autouse=True)
def restore_telemetry() -> Iterator[None]:
    yield
    telemetry.configure()


@pytest.fixture
def recording(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(telemetry, "tl", SimpleNamespace(Config=RecordingConfig))
    for name in ("LOG_PRESET", "LOG_FILE", "LOG_LEVEL", "DISABLE_CONSOLE"):
        monkeypatch.delenv(f"JUMP_BEACON_{name}", raising=False)


def test_tui_preset_keeps_console_clean(recording) -> None:
    config = telemetry.build_config(telemetry.preset_profile("tui"))

    assert ("with_console_output", False) in config.calls
    assert ("with_profiling", True) in config.calls
    assert not any(call[0] == "with_file_output" for call in config.calls)


def test_preset_file_follows_environment(recording, monkeypatch, tmp_path) -> None:
    log_file = str(tmp_path / "beacon.log")
    monkeypatch.setenv("JUMP_BEACON_LOG_FILE", log_file)

    config = telemetry.build_config(telemetry.preset_profile("TUI"))

    assert ("with_file_output", log_file) in config.calls


def test_unknown_preset_raises() -> None:
    with pytest.raises(ValueError, match="loud"):
        telemetry.preset_profile("loud")


def test_configure_accepts_one_source_only(recording) -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="tui", profile=telemetry.PRESETS["development"])


def test_log_preset_environment_variable_selects_preset(recording, monkeypatch) -> None:
    monkeypatch.setenv("JUMP_BEACON_LOG_PRESET", "performance")

    telemetry.configure()

    profile = telemetry.active_profile()
    assert profile is not None
    assert profile.name == "performance"
    assert profile.json is True


def test_environment_profile_without_preset(recording, monkeypatch) -> None:
    monkeypatch.setenv("JUMP_BEACON_LOG_LEVEL", "debug")
    monkeypatch.setenv("JUMP_BEACON_DISABLE_CONSOLE", "yes")

    telemetry.configure()

    profile = telemetry.active_profile()
    assert profile is not None
    assert profile.name == "environment"
    assert profile.level == "DEBUG"
    assert profile.console is False


@pytest.mark.asyncio
async def test_demo_main_applies_log_preset(recording, monkeypatch) -> None:
    launched = []
    monkeypatch.setattr(demo.BeaconDemoApp, "run", lambda self: launched.append(self))

    demo.main([])
    assert telemetry.active_profile().name == "tui"

    demo.main(["--log-preset", "development"])
    assert telemetry.active_profile().name == "development"
    assert len(launched) == 2
