"""
OBS Studio integration package

Provides request/response access to OBS and its notification stream
"""

from .client import StudioClient
from .events import SceneSwitched, StudioEvent, TransitionBegin, TransitionKindChanged

__all__ = [
    "StudioClient",
    "StudioEvent",
    "SceneSwitched",
    "TransitionBegin",
    "TransitionKindChanged",
]
