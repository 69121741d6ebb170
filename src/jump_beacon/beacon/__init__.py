"""Jump classification and beacon rendering."""

from .classifier import (
    MOUSE_DETECTION_WINDOW_MS,
    JumpClassifier,
    JumpDecision,
    JumpKind,
    TrackingState,
)
from .renderer import MIN_BEACON_WIDTH, BeaconInstance, BeaconPhase, BeaconRenderer

__all__ = [
    "BeaconInstance",
    "BeaconPhase",
    "BeaconRenderer",
    "JumpClassifier",
    "JumpDecision",
    "JumpKind",
    "MIN_BEACON_WIDTH",
    "MOUSE_DETECTION_WINDOW_MS",
    "TrackingState",
]
