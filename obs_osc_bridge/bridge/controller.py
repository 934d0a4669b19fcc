"""
OBS OSC Bridge Controller

High-level controller that wires the OSC transports, the OBS client and
the translation pipeline together and owns their lifecycle.
"""

import logging
import queue
import threading
from typing import Any, Dict, Optional

from ..error_handler import ErrorHandler
from ..exceptions import (
    BridgeError,
    StudioConnectionError,
    StudioRequestError,
    UnrecognizedMessageError,
    ValidationError,
)
from ..osc.client import FeedbackOSCClient
from ..osc.server import POLL_INTERVAL, BridgeOSCServer
from ..settings import Settings
from ..studio.client import StudioClient
from ..studio.events import StudioEvent
from .executor import CommandExecutor
from .feedback import FeedbackTranslator
from .resolver import CommandResolver
from .state import StudioStateCache

logger = logging.getLogger(__name__)

COMMAND_LIST_HINT = "See the README for the list of supported OSC commands"


class BridgeController:
    """Controller for the OSC <-> OBS bridge"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        studio: Optional[StudioClient] = None,
        osc_client: Optional[FeedbackOSCClient] = None,
    ):
        """Initialize the controller

        Args:
            settings: Application settings, loaded from the environment if omitted
            studio: OBS client, built from settings if omitted
            osc_client: Feedback sender, built from settings if omitted
        """
        self.settings = settings or Settings()

        self.studio = studio or StudioClient(
            host=self.settings.obs_host,
            port=self.settings.obs_port,
            password=self.settings.obs_password,
            timeout=self.settings.request_timeout,
        )
        self.osc_client = osc_client or FeedbackOSCClient(
            self.settings.osc_feedback_host, self.settings.osc_feedback_port
        )

        # One state cache shared by the command and feedback paths
        self.state = StudioStateCache()
        self.error_handler = ErrorHandler()

        calibration = self.settings.calibration
        self.resolver = CommandResolver(calibration)
        self.executor = CommandExecutor(
            self.studio,
            self.state,
            self.error_handler,
            canvas_center=(calibration.canvas_center_x, calibration.canvas_center_y),
        )
        self.translator = FeedbackTranslator(
            self.state,
            self.osc_client,
            studio=self.studio,
            enabled=self.settings.feedback_enabled,
            error_handler=self.error_handler,
        )
        self.server = BridgeOSCServer(
            self.settings.osc_listen_host,
            self.settings.osc_listen_port,
            message_handler=self.handle_message,
        )

        # Studio events are handled off the websocket receive thread
        self.events: "queue.Queue[StudioEvent]" = queue.Queue()
        self.event_thread: Optional[threading.Thread] = None

        # Controller state
        self.running = False
        self.messages_handled = 0
        self.cues_sent = 0

    def start(self) -> None:
        """Start the bridge

        Raises:
            StudioConnectionError: If OBS cannot be reached
            OSCTransportError: If the OSC port cannot be opened
        """
        if self.running:
            logger.warning("Bridge already running")
            return

        self.error_handler.clear_errors()
        self.error_handler.retry_with_timeout(
            self.studio.connect,
            "connect",
            max_retries=self.settings.obs_connect_attempts,
            retry_delay=1.0,
            timeout=self.settings.request_timeout * self.settings.obs_connect_attempts,
        )
        logger.info(
            f"Connected to OBS at {self.settings.obs_host}:{self.settings.obs_port}"
        )

        try:
            self._fetch_initial_state()
            self.studio.subscribe(self.events.put)

            self.running = True
            self.event_thread = threading.Thread(target=self._event_loop)
            self.event_thread.daemon = True
            self.event_thread.start()

            self.server.start()
        except Exception:
            self.stop()
            raise

        if self.settings.feedback_enabled:
            logger.info(
                f"Cue feedback to {self.settings.osc_feedback_host}:"
                f"{self.settings.osc_feedback_port}"
            )

    def _fetch_initial_state(self) -> None:
        """Log the scene list and cache the current transition"""
        scene_names = self.state.record_scene_list(self.studio.list_scenes())
        logger.info(f"{len(scene_names)} Available Scenes")
        for index, name in enumerate(scene_names, start=1):
            logger.info(f"  {index} - {name}")
        logger.info('Use "/scene [index]" for OSC control')

        try:
            transition = self.studio.get_transition()
        except StudioConnectionError:
            raise
        except StudioRequestError as e:
            self.error_handler.record_error("rejected", e)
            logger.warning("Current transition unknown until OBS reports a change")
            return
        name = transition.get("transitionName")
        if name:
            self.state.record_transition(name)
            logger.info(f"Current transition: {name}")

    def stop(self) -> None:
        """Stop the bridge"""
        was_running = self.running
        self.running = False
        self.server.stop()
        if self.event_thread:
            self.event_thread.join(timeout=1.0)
            self.event_thread = None
        self.studio.disconnect()
        if was_running:
            logger.info("Bridge stopped")

    def __enter__(self) -> "BridgeController":
        """Context manager entry"""
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit"""
        self.stop()

    def handle_message(self, address: str, *args: Any) -> None:
        """Resolve and execute one inbound OSC message

        Never raises: every failure is recorded and the dispatch loop moves on.
        """
        logger.info(f"OSC IN: {address} {list(args)}")
        self.messages_handled += 1
        try:
            command = self.resolver.resolve(address, args)
            self.executor.execute(command)
        except UnrecognizedMessageError as e:
            self.error_handler.record_error(e.category, e)
            logger.warning(COMMAND_LIST_HINT)
        except ValidationError as e:
            self.error_handler.record_error(e.category, e)
            if e.hint:
                logger.warning(e.hint)
        except BridgeError as e:
            self.error_handler.record_error(e.category, e)
        except Exception:
            logger.exception(f"Unexpected error while handling {address}")

    def _event_loop(self) -> None:
        """Feedback worker thread function"""
        while self.running:
            try:
                event = self.events.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            self.handle_event(event)

    def handle_event(self, event: StudioEvent) -> None:
        """Feed one studio event to the translator; never raises"""
        try:
            if self.translator.handle(event) is not None:
                self.cues_sent += 1
        except BridgeError as e:
            self.error_handler.record_error("feedback", e)
        except Exception:
            logger.exception(f"Unexpected error while handling {event!r}")

    def get_status(self) -> Dict[str, Any]:
        """Get controller status information

        Returns:
            Dictionary with status information
        """
        return {
            "running": self.running,
            "obs": {
                "host": self.settings.obs_host,
                "port": self.settings.obs_port,
                "connected": self.studio.connected,
            },
            "osc": {
                "listen": f"{self.settings.osc_listen_host}:{self.settings.osc_listen_port}",
                "feedback": f"{self.settings.osc_feedback_host}:{self.settings.osc_feedback_port}",
                "feedback_enabled": self.translator.enabled,
            },
            "messages_handled": self.messages_handled,
            "cues_sent": self.cues_sent,
            "state": self.state.snapshot(),
            "errors": self.error_handler.get_diagnostic_info(),
        }
