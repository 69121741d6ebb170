"""Fading beacon overlays driven by host timers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from jump_beacon.config import BeaconConfig
from jump_beacon.host import BeaconHost, CursorPosition, HostError
from jump_beacon.runtime import telemetry

LOGGER_NAME = "jump_beacon.renderer"
MIN_BEACON_WIDTH = 10
OPAQUE = 0
TRANSPARENT = 100


class BeaconPhase(str, Enum):
    CREATED = "created"
    FADING = "fading"
    FADED_OUT = "faded_out"
    HOST_INVALIDATED = "host_invalidated"
    TIMED_OUT = "timed_out"
    CLEARED = "cleared"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL_PHASES


_TERMINAL_PHASES = frozenset(
    {
        BeaconPhase.FADED_OUT,
        BeaconPhase.HOST_INVALIDATED,
        BeaconPhase.TIMED_OUT,
        BeaconPhase.CLEARED,
    }
)


@dataclass(slots=True, eq=False)
class BeaconInstance:
    """One live beacon and the host handles backing it."""

    overlay: object
    position: CursorPosition
    width: int
    transparency: int = OPAQUE
    timer: Optional[object] = None
    deadline: Optional[object] = None
    phase: BeaconPhase = BeaconPhase.CREATED
    ticks: int = 0
    history: list[int] = field(default_factory=list)

    @property
    def released(self) -> bool:
        return self.phase.terminal


class BeaconRenderer:
    """Allocates beacons and owns each one until its overlay is gone."""

    def __init__(
        self,
        host: BeaconHost,
        config: BeaconConfig,
        *,
        logger_name: str | None = LOGGER_NAME,
    ) -> None:
        self.host = host
        self.config = config
        self._logger_name = logger_name
        self._active: list[BeaconInstance] = []

    @property
    def active(self) -> tuple[BeaconInstance, ...]:
        return tuple(self._active)

    def show(
        self, position: CursorPosition, width: Optional[int] = None
    ) -> Optional[BeaconInstance]:
        """Draw a beacon at ``position``; returns ``None`` when nothing is shown."""

        config = self.config
        if not config.enabled:
            return None

        with telemetry.span(
            "beacon::show",
            logger_name=self._logger_name,
            component="renderer",
            metadata={"line": position.line, "column": position.column},
        ) as handle:
            width = self._clamp_width(position, config.max_width if width is None else width)
            try:
                overlay = self.host.open_overlay(position, width, config.highlight)
            except HostError as exc:
                handle.cancel("overlay_refused")
                self._host_error("open_overlay", exc)
                return None

            beacon = BeaconInstance(overlay=overlay, position=position, width=width)
            beacon.history.append(beacon.transparency)
            self._active.append(beacon)
            try:
                beacon.timer = self.host.start_timer(
                    0, config.interval_ms, lambda: self._tick(beacon)
                )
                beacon.deadline = self.host.defer(
                    config.timeout_ms, lambda: self._expire(beacon)
                )
            except HostError as exc:
                handle.cancel("timer_refused")
                self._host_error("start_timer", exc)
                self.release(beacon, BeaconPhase.HOST_INVALIDATED)
                return None

            handle.add_metadata("width", width)
            telemetry.record_event(
                "beacon.show",
                level="debug",
                data={"line": position.line, "width": width},
                logger_name=self._logger_name,
            )
            return beacon

    def show_at_cursor(self) -> Optional[BeaconInstance]:
        try:
            position = self.host.cursor_position()
        except HostError as exc:
            self._host_error("cursor_position", exc)
            return None
        return self.show(position)

    def release(self, beacon: BeaconInstance, phase: BeaconPhase) -> bool:
        """Tear ``beacon`` down once; later calls return ``False`` and do nothing."""

        if beacon.released:
            return False
        beacon.phase = phase

        self._cancel(beacon.timer)
        self._cancel(beacon.deadline)
        beacon.timer = None
        beacon.deadline = None

        # An overlay the host already destroyed is never touched again.
        try:
            if self.host.overlay_is_valid(beacon.overlay):
                self.host.close_overlay(beacon.overlay)
        except HostError as exc:
            self._host_error("close_overlay", exc)

        if beacon in self._active:
            self._active.remove(beacon)
        telemetry.record_event(
            "beacon.release",
            level="debug",
            data={"phase": phase.value, "ticks": beacon.ticks},
            logger_name=self._logger_name,
        )
        return True

    def clear(self) -> int:
        """Release every live beacon; returns how many were torn down."""

        released = 0
        for beacon in list(self._active):
            if self.release(beacon, BeaconPhase.CLEARED):
                released += 1
        return released

    def _tick(self, beacon: BeaconInstance) -> None:
        if beacon.released:
            return
        beacon.ticks += 1

        try:
            valid = self.host.overlay_is_valid(beacon.overlay)
        except HostError:
            valid = False
        if not valid:
            self.release(beacon, BeaconPhase.HOST_INVALIDATED)
            return

        beacon.phase = BeaconPhase.FADING
        beacon.transparency += self.config.fade_step
        beacon.history.append(beacon.transparency)
        if beacon.transparency >= TRANSPARENT:
            self.release(beacon, BeaconPhase.FADED_OUT)
            return

        try:
            self.host.set_overlay_transparency(beacon.overlay, beacon.transparency)
        except HostError as exc:
            self._host_error("set_overlay_transparency", exc)
            self.release(beacon, BeaconPhase.HOST_INVALIDATED)

    def _expire(self, beacon: BeaconInstance) -> None:
        beacon.deadline = None
        self.release(beacon, BeaconPhase.TIMED_OUT)

    def _clamp_width(self, position: CursorPosition, width: int) -> int:
        try:
            length = self.host.line_length(position.line)
        except HostError as exc:
            self._host_error("line_length", exc)
            return width
        return min(width, max(length, MIN_BEACON_WIDTH))

    def _cancel(self, timer: Optional[object]) -> None:
        if timer is None:
            return
        try:
            self.host.cancel_timer(timer)
        except HostError as exc:
            self._host_error("cancel_timer", exc)

    def _host_error(self, operation: str, exc: HostError) -> None:
        telemetry.record_event(
            "beacon.host_error",
            level="warning",
            data={"operation": operation, "error": str(exc)},
            logger_name=self._logger_name,
        )


__all__ = [
    "BeaconInstance",
    "BeaconPhase",
    "BeaconRenderer",
    "MIN_BEACON_WIDTH",
]
