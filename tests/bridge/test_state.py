"""Tests for the StudioStateCache class"""

import pytest

from obs_osc_bridge.bridge.state import StudioStateCache
from obs_osc_bridge.exceptions import StaleStateError

SCENES = ("Intro [1]", "Wide [2]", "Close")


def test_initial_state(state):
    assert state.last_transition is None
    assert state.scene_names == ()
    assert state.scenes_fetched_at is None
    assert state.selected_item is None


def test_record_transition_overwrites(state):
    state.record_transition("Fade")
    state.record_transition("Cut")

    assert state.last_transition == "Cut"


def test_record_scene_list(state):
    names = state.record_scene_list(list(SCENES))

    assert names == SCENES
    assert state.scene_names == SCENES
    assert state.scenes_fetched_at is not None


def test_current_scene_index():
    assert StudioStateCache.current_scene_index(SCENES, "Close") == 2


def test_current_scene_index_stale():
    with pytest.raises(StaleStateError, match="Scene not found: Gone"):
        StudioStateCache.current_scene_index(SCENES, "Gone")


@pytest.mark.parametrize(
    "current, step, expected",
    [
        ("Intro [1]", 1, "Wide [2]"),
        ("Close", 1, "Intro [1]"),
        ("Intro [1]", -1, "Close"),
        ("Wide [2]", -1, "Intro [1]"),
    ],
)
def test_neighbour_scene_wraps(state, current, step, expected):
    assert state.neighbour_scene(SCENES, current, step) == expected


def test_neighbour_scene_single_scene(state):
    assert state.neighbour_scene(["Only"], "Only", 1) == "Only"
    assert state.neighbour_scene(["Only"], "Only", -1) == "Only"


def test_select_item_and_snapshot(state):
    state.record_transition("Fade")
    state.select_item("Wide [2]", "VOX")

    snapshot = state.snapshot()

    assert state.selected_item == ("Wide [2]", "VOX")
    assert snapshot["last_transition"] == "Fade"
    assert snapshot["selected_item"] == ("Wide [2]", "VOX")
    assert snapshot["scene_names"] == []
