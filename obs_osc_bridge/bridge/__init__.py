"""
Bridge package

Translation pipeline from OSC messages to OBS requests and back
"""

from .commands import Command
from .controller import BridgeController
from .executor import CommandExecutor
from .feedback import FeedbackTranslator, extract_cue
from .resolver import CommandResolver
from .state import StudioStateCache

__all__ = [
    "BridgeController",
    "Command",
    "CommandExecutor",
    "CommandResolver",
    "FeedbackTranslator",
    "StudioStateCache",
    "extract_cue",
]
