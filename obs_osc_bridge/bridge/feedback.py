"""
Feedback Translator

Turns OBS scene changes into cue triggers for a downstream controller.
A scene named ``Wide [12]`` fires ``/cue/12/start`` when it goes live.

A scene change is reported once: through the "scene switched" event when
the cached transition is Cut, through the "transition began" event for
every other transition kind.
"""

import logging
from typing import Optional

from ..error_handler import ErrorHandler
from ..exceptions import StudioConnectionError, StudioRequestError
from ..osc.client import FeedbackOSCClient, OSCMessage
from ..studio.client import StudioClient
from ..studio.events import (
    SceneSwitched,
    StudioEvent,
    TransitionBegin,
    TransitionKindChanged,
)
from .commands import CUT_TRANSITION
from .state import StudioStateCache

logger = logging.getLogger(__name__)


def extract_cue(scene_name: Optional[str]) -> Optional[str]:
    """Cue id between the last '[' and the last ']' of a scene name

    Args:
        scene_name: Scene name, e.g. ``"Wide [12]"``

    Returns:
        The cue id (``"12"``), or None if the name carries no cue
    """
    if not scene_name:
        return None
    start = scene_name.rfind("[")
    end = scene_name.rfind("]")
    if start == -1 or end <= start + 1:
        return None
    return scene_name[start + 1 : end]


def cue_message(cue_id: str) -> OSCMessage:
    return OSCMessage(f"/cue/{cue_id}/start")


class FeedbackTranslator:
    """Translates studio events into outbound cue triggers"""

    def __init__(
        self,
        state: StudioStateCache,
        osc_client: Optional[FeedbackOSCClient] = None,
        studio: Optional[StudioClient] = None,
        enabled: bool = False,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """Initialize the translator

        Args:
            state: Shared studio state cache
            osc_client: Where cue triggers are sent
            studio: Used to look up the destination scene when OBS omits it
            enabled: Whether cue triggers are sent at all
            error_handler: Records failed lookups
        """
        self.state = state
        self.osc_client = osc_client
        self.studio = studio
        self.enabled = enabled
        self.error_handler = error_handler or ErrorHandler()

    def handle(self, event: StudioEvent) -> Optional[OSCMessage]:
        """Process one studio event

        Returns:
            The cue message sent, if any
        """
        if isinstance(event, TransitionKindChanged):
            self.on_transition_changed(event)
            return None
        if isinstance(event, SceneSwitched):
            return self.on_scene_switched(event)
        if isinstance(event, TransitionBegin):
            return self.on_transition_begin(event)
        logger.debug(f"Ignoring studio event: {event!r}")
        return None

    def on_transition_changed(self, event: TransitionKindChanged) -> None:
        # Recorded whether or not feedback is enabled
        self.state.record_transition(event.transition_name)

    def on_scene_switched(self, event: SceneSwitched) -> Optional[OSCMessage]:
        if not self.enabled or self.state.last_transition != CUT_TRANSITION:
            return None
        return self._trigger(event.scene_name)

    def on_transition_begin(self, event: TransitionBegin) -> Optional[OSCMessage]:
        if not self.enabled or self.state.last_transition == CUT_TRANSITION:
            return None
        to_scene = event.to_scene
        if to_scene is None:
            to_scene = self._lookup_current_scene()
        return self._trigger(to_scene)

    def _lookup_current_scene(self) -> Optional[str]:
        if self.studio is None:
            return None
        try:
            return self.studio.get_current_scene()
        except StudioConnectionError as e:
            self.error_handler.record_error("connection", e)
        except StudioRequestError as e:
            self.error_handler.record_error("rejected", e)
        return None

    def _trigger(self, scene_name: Optional[str]) -> Optional[OSCMessage]:
        cue_id = extract_cue(scene_name)
        if cue_id is None:
            return None
        message = cue_message(cue_id)
        if self.osc_client is not None:
            self.osc_client.send_message(message)
        logger.info(f"Cue triggered: {cue_id}")
        return message
