"""Jump detection over host cursor, click and buffer events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import time
from typing import Callable, Optional, TypeVar

from jump_beacon.config import BeaconConfig
from jump_beacon.host import CursorPosition
from jump_beacon.runtime import telemetry

LOGGER_NAME = "jump_beacon.classifier"
MOUSE_DETECTION_WINDOW_MS = 100

TriggerFn = Callable[[CursorPosition], object]
ClockFn = Callable[[], float]
EventT = TypeVar("EventT")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class JumpKind(str, Enum):
    MOUSE = "mouse"
    BUFFER_SWITCH = "buffer_switch"
    BELOW_THRESHOLD = "below_threshold"
    JUMP = "jump"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class JumpDecision:
    kind: JumpKind
    position: Optional[CursorPosition]
    distance: int = 0

    @property
    def triggered(self) -> bool:
        return self.kind in (JumpKind.JUMP, JumpKind.BUFFER_SWITCH)


@dataclass(slots=True)
class TrackingState:
    """Last observed cursor location and click time for one session."""

    last_position: CursorPosition = CursorPosition(0, 0)
    last_click_ms: Optional[float] = None


class JumpClassifier:
    """Decides which cursor movements deserve a beacon.

    Handlers are meant to be wired straight into host events and never raise:
    bad positions are ignored and trigger failures are logged.
    """

    def __init__(
        self,
        config: BeaconConfig,
        on_trigger: TriggerFn,
        *,
        clock: ClockFn = _monotonic_ms,
        state: TrackingState | None = None,
        logger_name: str | None = LOGGER_NAME,
    ) -> None:
        self.config = config
        self.state = state or TrackingState()
        self._on_trigger = on_trigger
        self._clock = clock
        self._logger_name = logger_name

    def on_cursor_moved(
        self,
        position: Optional[CursorPosition],
        timestamp: Optional[float] = None,
    ) -> JumpDecision:
        if not _usable(position):
            return JumpDecision(JumpKind.INVALID, position)
        assert position is not None
        now = self._clock() if timestamp is None else timestamp

        if self.config.ignore_mouse and self._within_click_window(now):
            self.state.last_position = position
            return JumpDecision(JumpKind.MOUSE, position)

        distance = abs(position.line - self.state.last_position.line)
        if distance >= self.config.min_jump:
            decision = JumpDecision(JumpKind.JUMP, position, distance)
            self._trigger(decision)
        else:
            decision = JumpDecision(JumpKind.BELOW_THRESHOLD, position, distance)

        self.state.last_position = position
        return decision

    def on_buffer_enter(self, position: Optional[CursorPosition]) -> JumpDecision:
        if not _usable(position):
            return JumpDecision(JumpKind.INVALID, position)
        assert position is not None
        decision = JumpDecision(
            JumpKind.BUFFER_SWITCH,
            position,
            abs(position.line - self.state.last_position.line),
        )
        self._trigger(decision)
        self.state.last_position = position
        return decision

    def on_mouse_button(self, event: EventT, timestamp: Optional[float] = None) -> EventT:
        """Note the click time and hand ``event`` back untouched."""

        self.state.last_click_ms = self._clock() if timestamp is None else timestamp
        return event

    def reset(self, position: CursorPosition) -> None:
        if _usable(position):
            self.state.last_position = position

    def _within_click_window(self, now: float) -> bool:
        clicked = self.state.last_click_ms
        if clicked is None:
            return False
        return 0 <= now - clicked <= MOUSE_DETECTION_WINDOW_MS

    def _trigger(self, decision: JumpDecision) -> None:
        assert decision.position is not None
        telemetry.record_event(
            "jump.trigger",
            level="debug",
            data={
                "kind": decision.kind.value,
                "line": decision.position.line,
                "distance": decision.distance,
            },
            logger_name=self._logger_name,
        )
        try:
            self._on_trigger(decision.position)
        except Exception as exc:  # keep the host's event chain alive
            telemetry.record_event(
                "jump.trigger_failed",
                level="error",
                data={"error": repr(exc)},
                logger_name=self._logger_name,
            )


def _usable(position: Optional[CursorPosition]) -> bool:
    return isinstance(position, CursorPosition) and position.is_valid


__all__ = [
    "JumpClassifier",
    "JumpDecision",
    "JumpKind",
    "MOUSE_DETECTION_WINDOW_MS",
    "TrackingState",
]
