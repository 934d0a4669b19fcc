"""
OSC transport package

Inbound server, outbound feedback client and address parsing
"""

from .address import ParsedAddress, decode_name, parse_address
from .client import FeedbackOSCClient, OSCMessage
from .server import BridgeOSCServer

__all__ = [
    "BridgeOSCServer",
    "FeedbackOSCClient",
    "OSCMessage",
    "ParsedAddress",
    "decode_name",
    "parse_address",
]
