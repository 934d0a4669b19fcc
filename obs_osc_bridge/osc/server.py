"""
Bridge OSC Server

Listens for OSC messages from control surfaces and hands them, one at a
time and in arrival order, to a message handler.
"""

import logging
import queue
import threading
from typing import Any, Callable, Optional, Tuple

from pythonosc import dispatcher
from pythonosc.osc_server import BlockingOSCUDPServer

from ..exceptions import OSCTransportError

logger = logging.getLogger(__name__)

# Default OSC settings
DEFAULT_LISTEN_IP = "0.0.0.0"
DEFAULT_LISTEN_PORT = 3333  # Port we listen on

# How often the receive and dispatch loops check the running flag
POLL_INTERVAL = 0.5

MessageHandler = Callable[..., None]


class BridgeOSCServer:
    """Server for receiving OSC messages from control surfaces"""

    def __init__(
        self,
        ip: str = DEFAULT_LISTEN_IP,
        port: int = DEFAULT_LISTEN_PORT,
        message_handler: Optional[MessageHandler] = None,
    ):
        """Initialize the OSC server

        Args:
            ip: The IP address to listen on
            port: The port to listen on
            message_handler: Called as ``handler(address, *args)`` for every
                message, always from the single dispatch thread
        """
        self.ip = ip
        self.port = port
        self.running = False
        self.message_handler = message_handler
        self.messages: "queue.Queue[Tuple[str, Tuple[Any, ...]]]" = queue.Queue()
        self.server: Optional[BlockingOSCUDPServer] = None
        self.server_thread: Optional[threading.Thread] = None
        self.dispatch_thread: Optional[threading.Thread] = None

        # Every address goes through the default handler
        self.dispatcher = dispatcher.Dispatcher()
        self.dispatcher.set_default_handler(self._default_handler)

    def _default_handler(self, address: str, *args: Any) -> None:
        """Queue an incoming message for the dispatch thread"""
        logger.debug(f"Received: {address} {list(args)}")
        self.messages.put((address, args))

    def start(self) -> None:
        """Start the OSC server

        Raises:
            OSCTransportError: If the listening socket cannot be opened
        """
        if self.running:
            logger.warning("Server already running")
            return

        try:
            self.server = BlockingOSCUDPServer((self.ip, self.port), self.dispatcher)
        except OSError as e:
            raise OSCTransportError(
                f"Failed to listen on {self.ip}:{self.port}", e
            ) from e
        self.server.timeout = POLL_INTERVAL
        logger.info(f"OSC Server listening on {self.ip}:{self.port}")

        self.running = True

        self.server_thread = threading.Thread(target=self._server_loop)
        self.server_thread.daemon = True
        self.server_thread.start()

        self.dispatch_thread = threading.Thread(target=self._dispatch_loop)
        self.dispatch_thread.daemon = True
        self.dispatch_thread.start()

    def _server_loop(self) -> None:
        """Receive thread function"""
        while self.running and self.server:
            self.server.handle_request()

    def _dispatch_loop(self) -> None:
        """Dispatch thread function"""
        while self.running:
            try:
                address, args = self.messages.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            self.dispatch(address, *args)

    def dispatch(self, address: str, *args: Any) -> None:
        """Hand one message to the message handler.

        The handler is expected to deal with its own errors; anything that
        escapes is logged so the next message is still processed.
        """
        if not self.message_handler:
            return
        try:
            self.message_handler(address, *args)
        except Exception:
            logger.exception(f"Unhandled error while processing {address}")

    def stop(self) -> None:
        """Stop the OSC server"""
        if not self.running:
            return

        logger.info("Shutting down OSC server...")
        self.running = False

        # Both loops exit on their next poll
        if self.server_thread:
            self.server_thread.join(timeout=1.0)
        if self.dispatch_thread:
            self.dispatch_thread.join(timeout=1.0)
        if self.server:
            self.server.server_close()
