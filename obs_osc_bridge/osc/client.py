"""
Feedback OSC Client

Sends OSC messages from the bridge to a downstream controller (e.g. QLab)
"""

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, List, Tuple

from pythonosc import udp_client
from pythonosc.osc_message_builder import BuildError

from ..exceptions import OSCTransportError

logger = logging.getLogger(__name__)

# Default OSC settings (QLab listens on 53000)
DEFAULT_FEEDBACK_IP = "127.0.0.1"
DEFAULT_FEEDBACK_PORT = 53000


@dataclass(frozen=True)
class OSCMessage:
    """An outbound OSC message: address plus ordered arguments."""

    address: str
    args: Tuple[Any, ...] = field(default_factory=tuple)


class FeedbackOSCClient:
    """Client for sending OSC feedback messages"""

    def __init__(
        self, ip: str = DEFAULT_FEEDBACK_IP, port: int = DEFAULT_FEEDBACK_PORT
    ):
        """Initialize the OSC client

        Args:
            ip: The IP address of the feedback target
            port: The port the feedback target listens on

        Raises:
            OSCTransportError: If unable to create the UDP client
        """
        try:
            self.ip = ip
            self.port = port
            self.client = udp_client.SimpleUDPClient(ip, port)
            self.addr_log: List[str] = []  # Log of sent addresses for verification
        except socket.error as e:
            raise OSCTransportError("Failed to create UDP client", e)

    def send(self, address: str, *args: Any) -> None:
        """Send an OSC message

        Args:
            address: The OSC address to send to
            *args: The arguments to send, none for a bare trigger

        Raises:
            OSCTransportError: If unable to send the message
        """
        try:
            logger.debug(f"Sending: {address} {list(args)}")
            self.client.send_message(address, list(args))
            self.addr_log.append(address)
        except (socket.error, BuildError) as e:
            raise OSCTransportError(f"Failed to send message to {address}", e)

    def send_message(self, message: OSCMessage) -> None:
        """Send a prepared OSCMessage"""
        self.send(message.address, *message.args)

    def get_sent_addresses(self) -> List[str]:
        """Get list of addresses that were sent

        Returns:
            List of OSC addresses that have been sent
        """
        return self.addr_log
