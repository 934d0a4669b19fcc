"""
Error Handler for the OBS OSC bridge.

This module provides centralized error recording and diagnostics for the
dispatch loop, plus the retry helper used when connecting to OBS.
"""

import logging
import time
from typing import Any, Callable, Dict, Tuple

from .exceptions import BridgeError, StudioTimeoutError

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Records bridge errors and tracks the health of the OBS connection."""

    def __init__(self, max_recent_errors: int = 10):
        """Initialize the error handler."""
        # Keep track of recent errors for diagnostics
        self.recent_errors: Dict[str, Tuple[float, BridgeError]] = {}
        self.max_recent_errors = max_recent_errors
        self.error_counts: Dict[str, int] = {}

        # Connection status tracking
        self.connection_status = {
            "last_successful_comm": 0.0,
            "consecutive_timeouts": 0,
            "last_error": None,
        }

    def clear_errors(self) -> None:
        """Clear all tracked errors."""
        self.recent_errors.clear()
        self.error_counts.clear()
        self.connection_status["consecutive_timeouts"] = 0
        self.connection_status["last_error"] = None

    def record_error(self, category: str, error: BridgeError) -> None:
        """Record an error for diagnostics.

        Args:
            category: Error category (e.g., 'validation', 'rejected', 'stale')
            error: The error that occurred
        """
        self.recent_errors[category] = (time.time(), error)
        self.error_counts[category] = self.error_counts.get(category, 0) + 1

        if len(self.recent_errors) > self.max_recent_errors:
            oldest_category = min(
                self.recent_errors, key=lambda k: self.recent_errors[k][0]
            )
            self.recent_errors.pop(oldest_category)

        if isinstance(error, StudioTimeoutError):
            self.connection_status["consecutive_timeouts"] += 1
        else:
            self.connection_status["consecutive_timeouts"] = 0

        self.connection_status["last_error"] = error
        logger.error(f"{category}: {error}")

    def record_success(self) -> None:
        """Record a successful communication."""
        self.connection_status["last_successful_comm"] = time.time()
        self.connection_status["consecutive_timeouts"] = 0

    def check_connection_health(self) -> bool:
        """Check if the connection to OBS seems healthy.

        Returns:
            True if the connection seems healthy, False otherwise
        """
        return self.connection_status["consecutive_timeouts"] <= 3

    def retry_with_timeout(
        self,
        operation: Callable,
        operation_name: str,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        timeout: float = 5.0,
        *args,
        **kwargs,
    ) -> Any:
        """Retry an operation until it succeeds or the time budget runs out.

        Args:
            operation: Function to call
            operation_name: Name of the operation (for error reporting)
            max_retries: Maximum number of attempts
            retry_delay: Delay between attempts
            timeout: Overall time budget for all attempts
            *args: Arguments to pass to the operation
            **kwargs: Keyword arguments to pass to the operation

        Returns:
            The result of the operation

        Raises:
            StudioTimeoutError: If the time budget is exhausted
            Exception: The last exception raised by the operation
        """
        start_time = time.time()

        for attempt in range(max_retries):
            if time.time() - start_time > timeout:
                break

            try:
                result = operation(*args, **kwargs)
                self.record_success()
                return result

            except Exception as e:
                logger.warning(
                    f"Attempt {attempt + 1}/{max_retries} for {operation_name} failed: {e}"
                )

                if attempt == max_retries - 1:
                    if isinstance(e, BridgeError):
                        self.record_error(operation_name, e)
                    raise

                time.sleep(retry_delay)

        error = StudioTimeoutError(operation_name, timeout)
        self.record_error(operation_name, error)
        raise error

    def get_diagnostic_info(self) -> Dict[str, Any]:
        """Get diagnostic information.

        Returns:
            Dictionary with diagnostic information
        """
        return {
            "connection_status": {
                "last_successful_comm": self.connection_status["last_successful_comm"],
                "consecutive_timeouts": self.connection_status["consecutive_timeouts"],
                "last_error": str(self.connection_status["last_error"])
                if self.connection_status["last_error"]
                else None,
                "connection_healthy": self.check_connection_health(),
            },
            "recent_errors": {
                category: {
                    "timestamp": timestamp,
                    "error": str(error),
                }
                for category, (timestamp, error) in self.recent_errors.items()
            },
            "error_counts": dict(self.error_counts),
        }
