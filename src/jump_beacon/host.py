"""Capabilities the beacon core needs from an editor host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Tuple

TimerCallback = Callable[[], None]


@dataclass(frozen=True, slots=True)
class CursorPosition:
    """0-based cursor snapshot reported by the host."""

    line: int
    column: int = 0

    @property
    def is_valid(self) -> bool:
        return self.line >= 0 and self.column >= 0

    def as_tuple(self) -> Tuple[int, int]:
        return (self.line, self.column)

    @classmethod
    def from_tuple(cls, location: Tuple[int, int]) -> "CursorPosition":
        line, column = location
        return cls(int(line), int(column))


class HostError(RuntimeError):
    """Raised by hosts when a window, line, overlay or timer call fails."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class BeaconHost(Protocol):
    """Window/buffer/overlay/timer primitives an editor must provide.

    Transparency runs from 0 (opaque) to 100 (invisible). Timer callbacks
    are delivered on the host's event loop and never overlap for one handle.
    """

    def cursor_position(self) -> CursorPosition: ...

    def line_length(self, line: int) -> int: ...

    def open_overlay(self, position: CursorPosition, width: int, style: str) -> object: ...

    def overlay_is_valid(self, overlay: object) -> bool: ...

    def set_overlay_transparency(self, overlay: object, value: int) -> None: ...

    def close_overlay(self, overlay: object) -> None: ...

    def start_timer(
        self, delay_ms: int, interval_ms: int, callback: TimerCallback
    ) -> object: ...

    def defer(self, delay_ms: int, callback: TimerCallback) -> object: ...

    def cancel_timer(self, timer: object) -> None: ...

    def now_ms(self) -> float: ...

    def jump(self, direction: int) -> None: ...

    def notify(self, message: str) -> None: ...


__all__ = ["BeaconHost", "CursorPosition", "HostError", "TimerCallback"]
