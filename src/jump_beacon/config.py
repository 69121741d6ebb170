"""Beacon configuration: defaults and option merging."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType(
    {
        "enabled": True,
        "fade_step": 8,  # transparency added per tick, in percent
        "max_width": 40,
        "timeout_ms": 500,  # hard upper bound on a beacon's lifetime
        "interval_ms": 50,
        "min_jump": 10,  # lines
        "highlight": "#FF6B6B",
        "auto_enable": True,
        "ignore_mouse": True,
    }
)


@dataclass(slots=True)
class BeaconConfig:
    """Live plugin options.

    The core keeps a reference and re-reads it on every operation, so edits
    (e.g. the toggle command flipping ``enabled``) apply from the next call on.
    Values are not validated; the renderer's timeout absorbs odd settings.
    """

    enabled: bool = DEFAULT_OPTIONS["enabled"]
    fade_step: int = DEFAULT_OPTIONS["fade_step"]
    max_width: int = DEFAULT_OPTIONS["max_width"]
    timeout_ms: int = DEFAULT_OPTIONS["timeout_ms"]
    interval_ms: int = DEFAULT_OPTIONS["interval_ms"]
    min_jump: int = DEFAULT_OPTIONS["min_jump"]
    highlight: str = DEFAULT_OPTIONS["highlight"]
    auto_enable: bool = DEFAULT_OPTIONS["auto_enable"]
    ignore_mouse: bool = DEFAULT_OPTIONS["ignore_mouse"]

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    def merge(self, options: Optional[Mapping[str, Any]] = None) -> "BeaconConfig":
        """Return a copy with ``options`` overriding the current values."""

        overrides = dict(options or {})
        unknown = sorted(set(overrides) - set(self.option_names()))
        if unknown:
            raise ValueError(f"Unknown beacon option(s): {', '.join(unknown)}")
        return replace(self, **overrides)

    def update(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Apply ``options`` in place so existing holders see the change."""

        merged = self.merge(options)
        for name in self.option_names():
            setattr(self, name, getattr(merged, name))

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.option_names()}


def load_config(options: Optional[Mapping[str, Any]] = None) -> BeaconConfig:
    """Defaults with ``options`` merged on top."""

    return BeaconConfig().merge(options)


__all__ = ["BeaconConfig", "DEFAULT_OPTIONS", "load_config"]
