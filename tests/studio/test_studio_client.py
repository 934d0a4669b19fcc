"""Tests for the StudioClient class"""

import socket
import unittest
from unittest.mock import MagicMock, call, patch

import pytest
from obswebsocket import requests as obsreq
from obswebsocket.exceptions import ConnectionFailure, MessageTimeout

from obs_osc_bridge.exceptions import (
    StudioConnectionError,
    StudioRequestError,
    StudioTimeoutError,
)
from obs_osc_bridge.studio.client import StudioClient
from obs_osc_bridge.studio.events import (
    SceneSwitched,
    TransitionBegin,
    TransitionKindChanged,
)


def response(datain=None, status=True):
    """Build a fake obs-websocket response"""
    return MagicMock(status=status, datain=datain or {})


def reject(request):
    """Fail a request the way obsws.call does when OBS reports an error"""
    request.input({}, False)
    return request


def notification(name, datain):
    """Build a fake obs-websocket event; 'name' is reserved by MagicMock"""
    event = MagicMock(datain=datain)
    event.name = name
    return event


class TestStudioClient(unittest.TestCase):
    """Test cases for StudioClient"""

    def setUp(self):
        """Set up test environment"""
        obsws_patcher = patch("obs_osc_bridge.studio.client.obsws")
        obsreq_patcher = patch("obs_osc_bridge.studio.client.obsreq")
        self.mock_obsws = obsws_patcher.start()
        self.mock_obsreq = obsreq_patcher.start()
        self.addCleanup(obsws_patcher.stop)
        self.addCleanup(obsreq_patcher.stop)

        self.ws = self.mock_obsws.return_value
        self.ws.call.return_value = response()
        self.client = StudioClient(host="10.0.0.2", port=4455, password="pw", timeout=2.0)

    def requests_sent(self):
        """(request type, fields) of every request built, in order"""
        sent = []
        for name, args, kwargs in self.mock_obsreq.method_calls:
            sent.append((name, kwargs))
        return sent

    def test_websocket_configuration(self):
        self.mock_obsws.assert_called_once_with(
            host="10.0.0.2", port=4455, password="pw", timeout=2.0
        )
        self.assertFalse(self.client.connected)

    def test_connect_and_disconnect(self):
        self.client.connect()
        self.ws.connect.assert_called_once()
        self.assertTrue(self.client.connected)

        self.client.disconnect()
        self.ws.disconnect.assert_called_once()
        self.assertFalse(self.client.connected)

    def test_connect_failure(self):
        self.ws.connect.side_effect = ConnectionFailure("Authentication failed")

        with pytest.raises(StudioConnectionError, match="Authentication failed"):
            self.client.connect()
        self.assertFalse(self.client.connected)

    def test_disconnect_when_not_connected(self):
        self.client.disconnect()
        self.ws.disconnect.assert_not_called()

    def test_call_returns_response_data(self):
        self.ws.call.return_value = response({"currentProgramSceneName": "Wide"})

        self.assertEqual(self.client.get_current_scene(), "Wide")
        self.assertEqual(self.requests_sent(), [("GetCurrentProgramScene", {})])

    def test_call_rejected(self):
        self.ws.call.side_effect = reject

        with patch("obs_osc_bridge.studio.client.obsreq", obsreq):
            with pytest.raises(StudioRequestError) as exc_info:
                self.client.set_current_scene("Missing")

        self.assertEqual(exc_info.value.operation, "SetCurrentProgramScene")
        self.assertEqual(exc_info.value.reason, "request failed for sceneName='Missing'")
        self.assertNotIsInstance(exc_info.value, StudioConnectionError)

    def test_call_rejected_without_fields(self):
        self.ws.call.side_effect = reject

        with patch("obs_osc_bridge.studio.client.obsreq", obsreq):
            with pytest.raises(StudioRequestError, match="request failed"):
                self.client.control_recording("start")

    def test_requests_are_serialized(self):
        def call(request):
            self.assertTrue(self.client._call_lock.locked())
            return response({"currentProgramSceneName": "Wide"})

        self.ws.call.side_effect = call

        self.assertEqual(self.client.get_current_scene(), "Wide")
        self.assertFalse(self.client._call_lock.locked())

    def test_call_timeout(self):
        self.ws.call.side_effect = MessageTimeout("no answer")

        with pytest.raises(StudioTimeoutError) as exc_info:
            self.client.list_scenes()
        self.assertEqual(exc_info.value.timeout, 2.0)

    def test_call_connection_lost(self):
        self.client.connected = True
        self.ws.call.side_effect = socket.error("broken pipe")

        with pytest.raises(StudioConnectionError):
            self.client.list_scenes()
        self.assertFalse(self.client.connected)

    def test_list_scenes_in_ui_order(self):
        # obs-websocket lists scenes bottom first
        self.ws.call.return_value = response(
            {"scenes": [{"sceneName": "Close"}, {"sceneName": "Wide"}, {"sceneName": "Intro"}]}
        )

        self.assertEqual(self.client.list_scenes(), ["Intro", "Wide", "Close"])

    def test_output_controls(self):
        self.client.control_recording("pause")
        self.client.control_streaming("toggle")

        self.assertEqual(
            self.requests_sent(), [("PauseRecord", {}), ("ToggleStream", {})]
        )

    def test_studio_mode(self):
        self.ws.call.return_value = response({"studioModeEnabled": True})

        self.assertTrue(self.client.get_studio_mode())
        self.client.set_studio_mode(False)

        self.assertEqual(
            self.requests_sent()[-1], ("SetStudioModeEnabled", {"studioModeEnabled": False})
        )

    def test_transitions(self):
        self.ws.call.return_value = response(
            {"transitionName": "Fade", "transitionDuration": 300}
        )

        self.assertEqual(self.client.get_transition_duration(), 300)
        self.client.set_transition("Luma Wipe")
        self.client.set_transition_duration(750)

        self.assertEqual(
            self.requests_sent(),
            [
                ("GetCurrentSceneTransition", {}),
                ("SetCurrentSceneTransition", {"transitionName": "Luma Wipe"}),
                ("SetCurrentSceneTransitionDuration", {"transitionDuration": 750}),
            ],
        )

    def test_scene_transition_override(self):
        self.client.set_scene_transition_override("Wide", "Fade")
        self.client.set_scene_transition_override("Wide", "Fade", 1200)

        self.assertEqual(
            self.requests_sent(),
            [
                (
                    "SetSceneSceneTransitionOverride",
                    {"sceneName": "Wide", "transitionName": "Fade"},
                ),
                (
                    "SetSceneSceneTransitionOverride",
                    {"sceneName": "Wide", "transitionName": "Fade", "transitionDuration": 1200},
                ),
            ],
        )

    def test_list_scene_items(self):
        self.ws.call.return_value = response(
            {"sceneItems": [{"sourceName": "VOX"}, {"sourceName": "Camera 1"}]}
        )

        self.assertEqual(self.client.list_scene_items("Wide"), ["VOX", "Camera 1"])

    def test_set_item_visibility(self):
        self.ws.call.return_value = response({"sceneItemId": 7})

        self.client.set_item_properties("Wide", "VOX", visible=True)

        self.assertEqual(
            self.requests_sent(),
            [
                ("GetSceneItemId", {"sceneName": "Wide", "sourceName": "VOX"}),
                (
                    "SetSceneItemEnabled",
                    {"sceneName": "Wide", "sceneItemId": 7, "sceneItemEnabled": True},
                ),
            ],
        )

    def test_set_item_transform(self):
        self.ws.call.return_value = response({"sceneItemId": 7})

        self.client.set_item_properties(
            "Wide", "VOX", position={"y": 100}, scale=0.5, alignment=0
        )

        self.assertEqual(
            self.requests_sent()[-1],
            (
                "SetSceneItemTransform",
                {
                    "sceneName": "Wide",
                    "sceneItemId": 7,
                    "sceneItemTransform": {
                        "positionY": 100,
                        "scaleX": 0.5,
                        "scaleY": 0.5,
                        "alignment": 0,
                    },
                },
            ),
        )

    def test_filters(self):
        self.client.set_filter_visibility("VOX", "chroma", False)
        self.client.set_filter_settings("VOX", "color", {"opacity": 50.0})

        self.assertEqual(
            self.requests_sent(),
            [
                (
                    "SetSourceFilterEnabled",
                    {"sourceName": "VOX", "filterName": "chroma", "filterEnabled": False},
                ),
                (
                    "SetSourceFilterSettings",
                    {"sourceName": "VOX", "filterName": "color", "filterSettings": {"opacity": 50.0}},
                ),
            ],
        )

    def test_subscribe_translates_events(self):
        callback = MagicMock()
        self.client.subscribe(callback)
        on_event = self.ws.register.call_args[0][0]

        on_event(notification("CurrentProgramSceneChanged", {"sceneName": "Wide [2]"}))
        on_event(
            notification("SceneTransitionStarted", {"transitionName": "Fade", "toScene": "Close"})
        )
        on_event(notification("CurrentSceneTransitionChanged", {"transitionName": "Cut"}))
        on_event(notification("InputMuteStateChanged", {}))

        self.assertEqual(
            callback.call_args_list,
            [
                call(SceneSwitched("Wide [2]")),
                call(TransitionBegin(transition_name="Fade", to_scene="Close")),
                call(TransitionKindChanged("Cut")),
            ],
        )


def test_transition_begin_without_destination():
    event = StudioClient._translate_event("SceneTransitionStarted", {"transitionName": "Fade"})
    assert event == TransitionBegin(transition_name="Fade", to_scene=None)
