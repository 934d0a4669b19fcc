"""
OBS OSC Bridge Exceptions

This module defines the error taxonomy shared by the resolver, the
executor and the studio client.
"""

from typing import Any, Optional, Sequence


class BridgeError(Exception):
    """Base exception class for bridge errors."""

    category = "bridge"

    def __init__(self, message: str):
        """Initialize with an error message."""
        self.message = message
        super().__init__(message)


class UnrecognizedMessageError(BridgeError):
    """Error when an OSC message matches no known command grammar."""

    category = "unrecognized"

    def __init__(self, address: str, args: Sequence[Any] = ()):
        """Initialize with the offending address and arguments."""
        self.address = address
        self.args_received = tuple(args)
        message = f"Invalid OSC command: {address}"
        if self.args_received:
            message += " " + " ".join(str(arg) for arg in self.args_received)
        super().__init__(message)


class ValidationError(BridgeError):
    """Error when a recognized command carries an invalid argument."""

    category = "validation"

    def __init__(
        self, parameter: str, value: Any, reason: str, hint: Optional[str] = None
    ):
        """Initialize with parameter name, value, reason and a usage hint."""
        self.parameter = parameter
        self.value = value
        self.reason = reason
        self.hint = hint
        message = f"Invalid parameter '{parameter}' with value '{value}': {reason}"
        if hint:
            message += f". {hint}"
        super().__init__(message)


class StudioRequestError(BridgeError):
    """Error when OBS rejects a request."""

    category = "rejected"

    def __init__(self, operation: str, reason: str):
        """Initialize with the request name and the reason OBS reported."""
        self.operation = operation
        self.reason = reason
        super().__init__(f"OBS rejected {operation}: {reason}")


class StudioConnectionError(StudioRequestError):
    """Error when the connection to OBS fails while issuing a request."""

    category = "connection"

    def __init__(self, operation: str = "connect", details: Optional[str] = None):
        """Initialize with the request name and optional details."""
        self.details = details
        reason = "connection to OBS failed" + (f": {details}" if details else "")
        super().__init__(operation, reason)


class StudioTimeoutError(StudioConnectionError):
    """Error when OBS does not answer a request in time."""

    def __init__(self, operation: str, timeout: float):
        """Initialize with operation name and timeout value."""
        self.timeout = timeout
        super().__init__(operation, f"no answer after {timeout} seconds")


class StaleStateError(BridgeError):
    """Error when freshly fetched OBS state does not contain an expected name."""

    category = "stale"

    def __init__(self, resource_type: str, identifier: str):
        """Initialize with resource type and identifier."""
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")


class OSCTransportError(BridgeError):
    """Error when the OSC transport encounters an issue."""

    category = "transport"

    def __init__(self, message: str, details: Optional[Exception] = None):
        """Initialize with message and optional exception details."""
        self.details = details
        full_message = message
        if details:
            full_message += f": {str(details)}"
        super().__init__(full_message)
