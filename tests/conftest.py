from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pytest

from jump_beacon.config import BeaconConfig
from jump_beacon.host import CursorPosition, HostError


@dataclass
class FakeTimer:
    seq: int
    due: float
    callback: Callable[[], None]
    interval: Optional[int] = None
    cancelled: bool = False
    cancel_calls: int = 0


@dataclass
class FakeOverlay:
    id: int
    position: CursorPosition
    width: int
    style: str
    valid: bool = True
    transparency: List[int] = field(default_factory=lambda: [0])
    close_calls: int = 0


class FakeHost:
    """Deterministic host: virtual millisecond clock and in-memory overlays."""

    def __init__(self, line_lengths: Optional[List[int]] = None) -> None:
        self.now = 0.0
        self.lines = list(line_lengths if line_lengths is not None else [80] * 500)
        self.cursor = CursorPosition(0, 0)
        self.overlays: Dict[int, FakeOverlay] = {}
        self.timers: List[FakeTimer] = []
        self.notifications: List[str] = []
        self.jump_targets: Dict[int, Optional[CursorPosition]] = {}
        self.refuse_overlays = False
        self.fail_lines = False
        self.fail_cursor = False
        self.fail_jump = False
        self.refuse_timers = False
        self.refuse_deferrals = False
        self.mutations_on_invalid = 0

    # -- BeaconHost ---------------------------------------------------------

    def cursor_position(self) -> CursorPosition:
        if self.fail_cursor:
            raise HostError("no window", operation="cursor_position")
        return self.cursor

    def line_length(self, line: int) -> int:
        if self.fail_lines or not 0 <= line < len(self.lines):
            raise HostError("line gone", operation="line_length")
        return self.lines[line]

    def open_overlay(self, position: CursorPosition, width: int, style: str) -> object:
        if self.refuse_overlays:
            raise HostError("invalid window", operation="open_overlay")
        overlay = FakeOverlay(len(self.overlays) + 1, position, width, style)
        self.overlays[overlay.id] = overlay
        return overlay

    def overlay_is_valid(self, overlay: object) -> bool:
        assert isinstance(overlay, FakeOverlay)
        return overlay.valid

    def set_overlay_transparency(self, overlay: object, value: int) -> None:
        assert isinstance(overlay, FakeOverlay)
        if not overlay.valid:
            self.mutations_on_invalid += 1
            raise HostError("overlay gone")
        overlay.transparency.append(value)

    def close_overlay(self, overlay: object) -> None:
        assert isinstance(overlay, FakeOverlay)
        if not overlay.valid:
            self.mutations_on_invalid += 1
            return
        overlay.close_calls += 1
        overlay.valid = False

    def start_timer(self, delay_ms: int, interval_ms: int, callback) -> object:
        if self.refuse_timers:
            raise HostError("timer limit reached", operation="start_timer")
        return self._schedule(delay_ms, callback, interval_ms)

    def defer(self, delay_ms: int, callback) -> object:
        if self.refuse_deferrals:
            raise HostError("timer limit reached", operation="defer")
        return self._schedule(delay_ms, callback, None)

    def cancel_timer(self, timer: object) -> None:
        assert isinstance(timer, FakeTimer)
        timer.cancel_calls += 1
        timer.cancelled = True

    def now_ms(self) -> float:
        return self.now

    def jump(self, direction: int) -> None:
        if self.fail_jump:
            raise HostError("jump list empty")
        target = self.jump_targets.get(direction)
        if target is not None:
            self.cursor = target

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    # -- test helpers -------------------------------------------------------

    def _schedule(self, delay_ms: int, callback, interval: Optional[int]) -> FakeTimer:
        timer = FakeTimer(
            seq=len(self.timers),
            due=self.now + max(delay_ms, 0),
            callback=callback,
            interval=interval,
        )
        self.timers.append(timer)
        return timer

    def advance(self, ms: float) -> None:
        """Run every timer due within ``ms``, one callback at a time."""

        end = self.now + ms
        while True:
            due = [t for t in self.timers if not t.cancelled and t.due <= end]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.cancelled = True
            else:
                timer.due += max(timer.interval, 1)
            timer.callback()
        self.now = end

    @property
    def live_timers(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    @property
    def live_overlays(self) -> List[FakeOverlay]:
        return [o for o in self.overlays.values() if o.valid]


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def make_host() -> Callable[..., FakeHost]:
    return FakeHost


@pytest.fixture
def config() -> BeaconConfig:
    return BeaconConfig()
