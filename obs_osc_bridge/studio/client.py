"""
OBS Studio Client

Request/response access to OBS through obs-websocket (protocol v5)
"""

import logging
import socket
import threading
from typing import Any, Callable, Dict, List, Optional

from obswebsocket import obsws
from obswebsocket import requests as obsreq
from obswebsocket.exceptions import ConnectionFailure, MessageTimeout
from websocket import WebSocketException

from ..exceptions import (
    StudioConnectionError,
    StudioRequestError,
    StudioTimeoutError,
)
from .events import SceneSwitched, StudioEvent, TransitionBegin, TransitionKindChanged

logger = logging.getLogger(__name__)

# Default obs-websocket settings
DEFAULT_OBS_HOST = "127.0.0.1"
DEFAULT_OBS_PORT = 4455
DEFAULT_TIMEOUT = 5.0

RECORDING_REQUESTS = {
    "start": "StartRecord",
    "stop": "StopRecord",
    "toggle": "ToggleRecord",
    "pause": "PauseRecord",
    "resume": "ResumeRecord",
}

STREAMING_REQUESTS = {
    "start": "StartStream",
    "stop": "StopStream",
    "toggle": "ToggleStream",
}


def describe_rejection(data: Dict[str, Any]) -> str:
    """Reason for a failed request, naming the fields it was sent with

    obs-websocket-py keeps only the result flag of a failed request, not the
    comment OBS sends with it.
    """
    if not data:
        return "request failed"
    fields = ", ".join(f"{key}={value!r}" for key, value in data.items())
    return f"request failed for {fields}"


class StudioClient:
    """Client for controlling OBS Studio over obs-websocket"""

    def __init__(
        self,
        host: str = DEFAULT_OBS_HOST,
        port: int = DEFAULT_OBS_PORT,
        password: str = "",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the studio client

        Args:
            host: Host of the obs-websocket server
            port: Port of the obs-websocket server
            password: obs-websocket password
            timeout: Seconds to wait for the answer to any single request
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.ws = obsws(host=host, port=port, password=password, timeout=timeout)
        self.connected = False
        # obsws numbers requests without locking; the dispatch and feedback
        # threads both issue requests
        self._call_lock = threading.Lock()

    def connect(self) -> None:
        """Open the websocket connection

        Raises:
            StudioConnectionError: If OBS cannot be reached or authentication fails
        """
        try:
            self.ws.connect()
        except (ConnectionFailure, WebSocketException, socket.error) as e:
            self.connected = False
            raise StudioConnectionError("connect", str(e)) from e
        self.connected = True
        logger.info(f"Connected to OBS websocket at {self.host}:{self.port}")

    def disconnect(self) -> None:
        """Close the websocket connection"""
        if not self.connected:
            return
        self.connected = False
        try:
            self.ws.disconnect()
        except (WebSocketException, socket.error) as e:
            logger.warning(f"Error while disconnecting from OBS: {e}")

    def subscribe(self, callback: Callable[[StudioEvent], None]) -> None:
        """Forward OBS notifications to ``callback`` as studio events

        The callback runs on the websocket receive thread and must not issue
        requests itself.
        """

        def _on_event(message: Any) -> None:
            event = self._translate_event(message.name, message.datain or {})
            if event is not None:
                callback(event)

        self.ws.register(_on_event)

    @staticmethod
    def _translate_event(name: str, data: Dict[str, Any]) -> Optional[StudioEvent]:
        """Map a raw obs-websocket event onto a studio event"""
        if name == "CurrentProgramSceneChanged":
            return SceneSwitched(data["sceneName"])
        if name == "SceneTransitionStarted":
            return TransitionBegin(
                transition_name=data.get("transitionName"),
                to_scene=data.get("toScene"),
            )
        if name == "CurrentSceneTransitionChanged":
            return TransitionKindChanged(data["transitionName"])
        return None

    def call(self, operation: str, **data: Any) -> Dict[str, Any]:
        """Issue one request and return its response data

        Args:
            operation: obs-websocket request type, e.g. ``GetSceneList``
            **data: Request fields

        Returns:
            The response data dictionary

        Raises:
            StudioTimeoutError: If OBS does not answer within the timeout
            StudioConnectionError: If the connection fails
            StudioRequestError: If OBS reports the request as failed
        """
        request = getattr(obsreq, operation)(**data)
        logger.debug(f"Request: {operation} {data}")
        try:
            with self._call_lock:
                response = self.ws.call(request)
        except MessageTimeout as e:
            raise StudioTimeoutError(operation, self.timeout) from e
        except (ConnectionFailure, WebSocketException, socket.error) as e:
            self.connected = False
            raise StudioConnectionError(operation, str(e)) from e

        if not response.status:
            raise StudioRequestError(operation, describe_rejection(data))
        return response.datain or {}

    # Scenes
    def list_scenes(self) -> List[str]:
        """Scene names in the order OBS shows them, top first"""
        scenes = self.call("GetSceneList")["scenes"]
        return [scene["sceneName"] for scene in reversed(scenes)]

    def get_current_scene(self) -> str:
        """Name of the current program scene"""
        return self.call("GetCurrentProgramScene")["currentProgramSceneName"]

    def set_current_scene(self, scene_name: str) -> None:
        self.call("SetCurrentProgramScene", sceneName=scene_name)

    def set_preview_scene(self, scene_name: str) -> None:
        self.call("SetCurrentPreviewScene", sceneName=scene_name)

    # Outputs
    def control_recording(self, action: str) -> None:
        """Start, stop, toggle, pause or resume recording"""
        self.call(RECORDING_REQUESTS[action])

    def control_streaming(self, action: str) -> None:
        """Start, stop or toggle streaming"""
        self.call(STREAMING_REQUESTS[action])

    def get_studio_mode(self) -> bool:
        return bool(self.call("GetStudioModeEnabled")["studioModeEnabled"])

    def set_studio_mode(self, enabled: bool) -> None:
        self.call("SetStudioModeEnabled", studioModeEnabled=enabled)

    # Transitions
    def get_transition(self) -> Dict[str, Any]:
        """Current transition as ``{"transitionName", "transitionDuration"}``"""
        return self.call("GetCurrentSceneTransition")

    def set_transition(self, transition_name: str) -> None:
        self.call("SetCurrentSceneTransition", transitionName=transition_name)

    def get_transition_duration(self) -> Optional[int]:
        return self.get_transition().get("transitionDuration")

    def set_transition_duration(self, duration_ms: int) -> None:
        self.call("SetCurrentSceneTransitionDuration", transitionDuration=duration_ms)

    def get_scene_transition_override(self, scene_name: str) -> Dict[str, Any]:
        return self.call("GetSceneSceneTransitionOverride", sceneName=scene_name)

    def set_scene_transition_override(
        self,
        scene_name: str,
        transition_name: Optional[str],
        duration_ms: Optional[int] = None,
    ) -> None:
        data: Dict[str, Any] = {
            "sceneName": scene_name,
            "transitionName": transition_name,
        }
        if duration_ms is not None:
            data["transitionDuration"] = duration_ms
        self.call("SetSceneSceneTransitionOverride", **data)

    # Scene items
    def list_scene_items(self, scene_name: str) -> List[str]:
        """Source names of the items in a scene"""
        items = self.call("GetSceneItemList", sceneName=scene_name)["sceneItems"]
        return [item["sourceName"] for item in items]

    def set_item_properties(
        self,
        scene_name: str,
        item_name: str,
        visible: Optional[bool] = None,
        position: Optional[Dict[str, float]] = None,
        scale: Optional[float] = None,
        rotation: Optional[float] = None,
        alignment: Optional[int] = None,
    ) -> None:
        """Update visibility and/or transform of one scene item

        Args:
            scene_name: Scene containing the item
            item_name: Source name of the item
            visible: New visibility, unchanged if None
            position: ``{"x": ..., "y": ...}``; either key may be omitted
            scale: Uniform scale factor
            rotation: Rotation in degrees
            alignment: OBS alignment flags
        """
        item_id = self.call("GetSceneItemId", sceneName=scene_name, sourceName=item_name)[
            "sceneItemId"
        ]

        if visible is not None:
            self.call(
                "SetSceneItemEnabled",
                sceneName=scene_name,
                sceneItemId=item_id,
                sceneItemEnabled=visible,
            )

        transform: Dict[str, Any] = {}
        if position:
            if "x" in position:
                transform["positionX"] = position["x"]
            if "y" in position:
                transform["positionY"] = position["y"]
        if scale is not None:
            transform["scaleX"] = scale
            transform["scaleY"] = scale
        if rotation is not None:
            transform["rotation"] = rotation
        if alignment is not None:
            transform["alignment"] = alignment

        if transform:
            self.call(
                "SetSceneItemTransform",
                sceneName=scene_name,
                sceneItemId=item_id,
                sceneItemTransform=transform,
            )

    # Filters
    def set_filter_visibility(
        self, source_name: str, filter_name: str, enabled: bool
    ) -> None:
        self.call(
            "SetSourceFilterEnabled",
            sourceName=source_name,
            filterName=filter_name,
            filterEnabled=enabled,
        )

    def set_filter_settings(
        self, source_name: str, filter_name: str, settings: Dict[str, Any]
    ) -> None:
        self.call(
            "SetSourceFilterSettings",
            sourceName=source_name,
            filterName=filter_name,
            filterSettings=settings,
        )
