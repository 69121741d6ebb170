"""Textual host for the beacon plugin."""

from .host import BeaconOverlay, BeaconTextArea, TextualBeaconHost
from .jumplist import JumpList

__all__ = ["BeaconOverlay", "BeaconTextArea", "JumpList", "TextualBeaconHost"]
