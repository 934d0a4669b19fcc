"""
conftest.py - Configuration for pytest

This file contains fixtures that are available to all test files
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add the parent directory to sys.path to make the module importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from obs_osc_bridge.bridge.state import StudioStateCache  # noqa: E402
from obs_osc_bridge.studio.client import StudioClient  # noqa: E402


@pytest.fixture
def state():
    """A fresh studio state cache"""
    return StudioStateCache()


@pytest.fixture
def studio():
    """A studio client double that accepts every request"""
    mock = MagicMock(spec=StudioClient)
    mock.list_scenes.return_value = ["Intro [1]", "Wide [2]", "Close"]
    mock.get_current_scene.return_value = "Wide [2]"
    mock.list_scene_items.return_value = ["VOX", "Camera 1"]
    mock.get_transition_duration.return_value = 300
    mock.get_transition.return_value = {
        "transitionName": "Fade",
        "transitionDuration": 300,
    }
    mock.get_scene_transition_override.return_value = {
        "transitionName": "Fade",
        "transitionDuration": 300,
    }
    mock.get_studio_mode.return_value = False
    mock.connected = True
    return mock
