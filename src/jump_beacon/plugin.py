"""Plugin façade wiring config, classifier, renderer and commands to a host."""

from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar

from jump_beacon.beacon import (
    BeaconInstance,
    BeaconRenderer,
    JumpClassifier,
    JumpDecision,
)
from jump_beacon.config import BeaconConfig, load_config
from jump_beacon.host import BeaconHost, CursorPosition, HostError
from jump_beacon.keymaps import KeymapRegistry, load_default_keymaps
from jump_beacon.runtime import telemetry

LOGGER_NAME = "jump_beacon.plugin"
JUMP_SETTLE_MS = 10
BACKWARD = -1
FORWARD = 1

EventT = TypeVar("EventT")


class JumpBeaconPlugin:
    """One editing session's beacon plugin.

    ``setup`` may be called again to change options. Each call starts from
    the defaults, the live config object is updated in place and nothing is
    wired twice.
    """

    def __init__(
        self,
        host: BeaconHost,
        *,
        registry: KeymapRegistry | None = None,
        logger_name: str | None = LOGGER_NAME,
    ) -> None:
        self.host = host
        self.config = BeaconConfig()
        self.registry = registry or KeymapRegistry(logger_name="jump_beacon.keymaps")
        self.renderer: BeaconRenderer | None = None
        self.classifier: JumpClassifier | None = None
        self._logger_name = logger_name
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def setup(
        self,
        options: Optional[Mapping[str, Any]] = None,
        *,
        keys: Optional[Mapping[str, Optional[str]]] = None,
    ) -> "JumpBeaconPlugin":
        """Apply ``options`` over the defaults and (re)install the keymaps.

        ``keys`` maps a binding id such as ``"beacon.show"`` to another key
        token, or to ``None`` to leave that binding unbound.
        """

        self.config.update(load_config(options).as_dict())

        if self.renderer is None:
            self.renderer = BeaconRenderer(self.host, self.config)
        if self.config.auto_enable and self.classifier is None:
            self.classifier = JumpClassifier(
                self.config, self._on_jump, clock=self.host.now_ms
            )
            self._seed_tracking()
        elif not self.config.auto_enable:
            self.classifier = None

        load_default_keymaps(self.registry, replace=self._loaded, key_overrides=keys)
        self._loaded = True
        self._event("plugin.setup", self.config.as_dict())
        return self

    # -- user-facing commands -------------------------------------------------

    def show(
        self, position: CursorPosition, width: Optional[int] = None
    ) -> Optional[BeaconInstance]:
        return self._require_renderer().show(position, width)

    def show_at_cursor(self) -> Optional[BeaconInstance]:
        return self._require_renderer().show_at_cursor()

    def toggle(self) -> bool:
        self.config.enabled = not self.config.enabled
        status = "enabled" if self.config.enabled else "disabled"
        try:
            self.host.notify(f"Jump beacon {status}")
        except HostError as exc:
            self._event("plugin.notify_failed", {"error": str(exc)}, level="warning")
        return self.config.enabled

    def jump_backward(self) -> None:
        self._jump_with_beacon(BACKWARD)

    def jump_forward(self) -> None:
        self._jump_with_beacon(FORWARD)

    def run_action(self, action_id: str) -> object:
        return self.registry.get_action(action_id)(self)

    def run_command(self, command: str) -> object:
        action = self.registry.find_command(command)
        if action is None:
            raise KeyError(f"Unknown command '{command}'")
        return action(self)

    def shutdown(self) -> None:
        if self.renderer is not None:
            self.renderer.clear()

    # -- host event entry points ----------------------------------------------

    def cursor_moved(
        self, position: Optional[CursorPosition], timestamp: Optional[float] = None
    ) -> Optional[JumpDecision]:
        if self.classifier is None:
            return None
        return self.classifier.on_cursor_moved(position, timestamp)

    def buffer_entered(self, position: Optional[CursorPosition]) -> Optional[JumpDecision]:
        if self.classifier is None:
            return None
        return self.classifier.on_buffer_enter(position)

    def mouse_pressed(self, event: EventT, timestamp: Optional[float] = None) -> EventT:
        if self.classifier is None:
            return event
        return self.classifier.on_mouse_button(event, timestamp)

    # -- internals --------------------------------------------------------------

    def _on_jump(self, position: CursorPosition) -> None:
        self._require_renderer().show(position)

    def _jump_with_beacon(self, direction: int) -> None:
        before = self._cursor()
        try:
            self.host.jump(direction)
        except HostError as exc:
            self._event(
                "plugin.jump_failed",
                {"direction": direction, "error": str(exc)},
                level="warning",
            )
            return

        def settle() -> None:
            after = self._cursor()
            if after is not None and after != before:
                self.show_at_cursor()

        try:
            self.host.defer(JUMP_SETTLE_MS, settle)
        except HostError as exc:
            self._event("plugin.defer_failed", {"error": str(exc)}, level="warning")

    def _event(self, name: str, data: dict[str, Any], *, level: str = "info") -> None:
        telemetry.record_event(name, level=level, data=data, logger_name=self._logger_name)

    def _cursor(self) -> Optional[CursorPosition]:
        try:
            return self.host.cursor_position()
        except HostError:
            return None

    def _seed_tracking(self) -> None:
        position = self._cursor()
        if position is not None and self.classifier is not None:
            self.classifier.reset(position)

    def _require_renderer(self) -> BeaconRenderer:
        if self.renderer is None:
            raise RuntimeError("JumpBeaconPlugin.setup() has not been called")
        return self.renderer


__all__ = ["JumpBeaconPlugin", "JUMP_SETTLE_MS"]
