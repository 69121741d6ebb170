"""Built-in commands and key bindings."""

from __future__ import annotations

from typing import Mapping, Optional

from jump_beacon import actions

from .models import ActionRef, Binding, KeyStroke
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="beacon.show",
        handler=actions.show_beacon,
        command="JumpBeacon",
        description="Show beacon at cursor position",
    ),
    ActionRef(
        id="beacon.toggle",
        handler=actions.toggle_beacon,
        command="JumpBeaconToggle",
        description="Toggle jump beacon on/off",
    ),
    ActionRef(
        id="beacon.jump_back",
        handler=actions.jump_back,
        description="Jump back with beacon",
    ),
    ActionRef(
        id="beacon.jump_forward",
        handler=actions.jump_forward,
        description="Jump forward with beacon",
    ),
)

DEFAULT_BINDINGS: tuple[Binding, ...] = (
    Binding("beacon.show", KeyStroke.parse("ctrl+b"), "beacon.show", "Beacon"),
    Binding("beacon.toggle", KeyStroke.parse("ctrl+t"), "beacon.toggle", "Toggle"),
    Binding("beacon.jump_back", KeyStroke.parse("ctrl+o"), "beacon.jump_back", "Back"),
    Binding(
        "beacon.jump_forward",
        KeyStroke.parse("ctrl+i"),
        "beacon.jump_forward",
        "Forward",
    ),
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    key_overrides: Optional[Mapping[str, Optional[str]]] = None,
) -> KeymapRegistry:
    """Seed ``registry`` with the plugin commands.

    ``key_overrides`` maps a binding id to a different key token, or to
    ``None`` to drop that binding.
    """

    overrides = dict(key_overrides or {})
    unknown = sorted(set(overrides) - {binding.id for binding in DEFAULT_BINDINGS})
    if unknown:
        raise KeyError(f"Unknown binding id(s): {', '.join(unknown)}")

    for action in DEFAULT_ACTIONS:
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if binding.id in overrides and overrides[binding.id] is None:
            registry.unregister_binding(binding.id)
            continue
        if binding.id in overrides:
            binding = Binding(
                binding.id,
                KeyStroke.parse(overrides[binding.id]),
                binding.action_id,
                binding.description,
            )
        registry.register_binding(binding, replace=replace)
    return registry


__all__ = ["DEFAULT_ACTIONS", "DEFAULT_BINDINGS", "load_default_keymaps"]
