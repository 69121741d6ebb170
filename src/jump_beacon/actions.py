"""Command handlers exposed through the keymap registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from jump_beacon.plugin import JumpBeaconPlugin


def show_beacon(plugin: "JumpBeaconPlugin") -> object:
    return plugin.show_at_cursor()


def toggle_beacon(plugin: "JumpBeaconPlugin") -> bool:
    return plugin.toggle()


def jump_back(plugin: "JumpBeaconPlugin") -> None:
    plugin.jump_backward()


def jump_forward(plugin: "JumpBeaconPlugin") -> None:
    plugin.jump_forward()


__all__ = ["jump_back", "jump_forward", "show_beacon", "toggle_beacon"]
