"""
OBS OSC Bridge

Lets OSC control surfaces drive OBS Studio scenes, sources, transitions
and outputs, and sends scene changes back out as OSC cue triggers.
"""

from .app import main
from .bridge.controller import BridgeController
from .settings import Settings, get_settings

__all__ = ["Settings", "BridgeController", "main", "get_settings"]
