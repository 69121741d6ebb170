"""Beacon host backed by a Textual ``TextArea``."""

from __future__ import annotations

import time
from typing import Callable, Optional

from textual import events
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Static, TextArea

from jump_beacon.host import CursorPosition, HostError, TimerCallback

from .jumplist import JumpList

BEACON_LAYER = "beacon"


class BeaconOverlay(Static):
    """Single-row coloured strip drawn above the editor."""

    DEFAULT_CSS = """
    BeaconOverlay {
        layer: beacon;
        height: 1;
        background: #FF6B6B;
    }
    """

    def __init__(self, width: int, style: str) -> None:
        super().__init__(" " * width, classes="jump-beacon")
        self.dismissed = False
        self.styles.width = width
        self.styles.background = style
        self.styles.opacity = 1.0

    def on_unmount(self) -> None:
        self.dismissed = True


class BeaconTextArea(TextArea):
    """``TextArea`` that reports mouse presses before handling them.

    The observer runs ahead of ``TextArea``'s own handler and never stops the
    event, so clicks behave exactly as they do on a plain ``TextArea``.
    """

    def __init__(
        self,
        text: str = "",
        *,
        click_observer: Optional[Callable[[events.MouseDown], object]] = None,
        **kwargs: object,
    ) -> None:
        super().__init__(text, **kwargs)  # type: ignore[arg-type]
        self.click_observer = click_observer

    def _on_mouse_down(self, event: events.MouseDown) -> None:
        if self.click_observer is not None:
            self.click_observer(event)


class _RepeatingTimer:
    """Interval timer whose first tick may fire before the first period."""

    def __init__(
        self,
        owner: TextArea,
        delay_ms: int,
        interval_ms: int,
        callback: TimerCallback,
    ) -> None:
        self._owner = owner
        self._interval = max(interval_ms, 1) / 1000.0
        self._callback = callback
        self._inner: Optional[Timer] = None
        self.stopped = False
        if delay_ms <= 0:
            owner.call_later(self._begin)
        else:
            self._inner = owner.set_timer(delay_ms / 1000.0, self._begin)

    def _begin(self) -> None:
        if self.stopped:
            return
        self._callback()
        if not self.stopped:
            self._inner = self._owner.set_interval(self._interval, self._fire)

    def _fire(self) -> None:
        if not self.stopped:
            self._callback()

    def stop(self) -> None:
        self.stopped = True
        if self._inner is not None:
            self._inner.stop()
            self._inner = None


class TextualBeaconHost:
    """Implements ``BeaconHost`` for one ``TextArea`` on a Textual screen."""

    def __init__(self, text_area: TextArea, *, jumplist: JumpList | None = None) -> None:
        self.text_area = text_area
        self.jumplist = jumplist or JumpList()

    def cursor_position(self) -> CursorPosition:
        try:
            return CursorPosition.from_tuple(self.text_area.cursor_location)
        except Exception as exc:
            raise HostError(str(exc), operation="cursor_position") from exc

    def line_length(self, line: int) -> int:
        document = self.text_area.document
        if line < 0 or line >= document.line_count:
            raise HostError(f"Line {line} out of range", operation="line_length")
        return len(document.get_line(line))

    def open_overlay(self, position: CursorPosition, width: int, style: str) -> object:
        text_area = self.text_area
        container = text_area.parent
        if not text_area.is_attached or not isinstance(container, Widget):
            raise HostError("Text area is not mounted", operation="open_overlay")

        # Screen cell of the target, then made relative to the container that
        # hosts the beacon layer.
        region = text_area.content_region
        scroll_x, scroll_y = text_area.scroll_offset
        x = region.x + text_area.gutter_width + position.column - scroll_x
        y = region.y + position.line - scroll_y
        if not (region.y <= y < region.bottom and region.x <= x < region.right):
            raise HostError(
                f"Position {position.as_tuple()} is not visible",
                operation="open_overlay",
            )

        origin = container.content_region
        overlay = BeaconOverlay(max(1, min(width, region.right - x)), style)
        overlay.styles.offset = (x - origin.x, y - origin.y)
        try:
            container.mount(overlay)
        except Exception as exc:
            raise HostError(str(exc), operation="open_overlay") from exc
        return overlay

    def overlay_is_valid(self, overlay: object) -> bool:
        return isinstance(overlay, BeaconOverlay) and not overlay.dismissed

    def set_overlay_transparency(self, overlay: object, value: int) -> None:
        if not self.overlay_is_valid(overlay):
            raise HostError("Overlay is gone", operation="set_overlay_transparency")
        assert isinstance(overlay, BeaconOverlay)
        overlay.styles.opacity = max(0.0, 1.0 - value / 100.0)

    def close_overlay(self, overlay: object) -> None:
        if not self.overlay_is_valid(overlay):
            return
        assert isinstance(overlay, BeaconOverlay)
        overlay.dismissed = True
        overlay.remove()

    def start_timer(
        self, delay_ms: int, interval_ms: int, callback: TimerCallback
    ) -> object:
        return _RepeatingTimer(self.text_area, delay_ms, interval_ms, callback)

    def defer(self, delay_ms: int, callback: TimerCallback) -> object:
        return self.text_area.set_timer(max(delay_ms, 0) / 1000.0, callback)

    def cancel_timer(self, timer: object) -> None:
        if isinstance(timer, (Timer, _RepeatingTimer)):
            timer.stop()
            return
        raise HostError(f"Unknown timer handle {timer!r}", operation="cancel_timer")

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def jump(self, direction: int) -> None:
        current = self.cursor_position()
        if direction < 0:
            target = self.jumplist.back(current)
        else:
            target = self.jumplist.forward()
        if target is None:
            return
        last_line = max(self.text_area.document.line_count - 1, 0)
        self.text_area.move_cursor((min(target.line, last_line), target.column))

    def record_jump(self) -> None:
        """Store the current position as the origin of a programmatic jump."""

        self.jumplist.record(self.cursor_position())

    def notify(self, message: str) -> None:
        self.text_area.app.notify(message)


__all__ = [
    "BEACON_LAYER",
    "BeaconOverlay",
    "BeaconTextArea",
    "TextualBeaconHost",
]
