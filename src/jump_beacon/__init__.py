"""Fading cursor beacons for large editor jumps."""

__all__ = [
    "actions",
    "adapters",
    "beacon",
    "config",
    "host",
    "keymaps",
    "plugin",
    "runtime",
]

__version__ = "0.1.0"
