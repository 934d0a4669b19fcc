"""
OBS OSC Bridge

Application entry point. Runs the bridge until interrupted and provides
the ``obs-osc-bridge`` command.
"""

import asyncio
import logging
import sys
from typing import Optional

from obs_osc_bridge.bridge.controller import BridgeController
from obs_osc_bridge.settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def run_bridge(settings: Optional[Settings] = None) -> None:
    """Run the bridge until it stops or the task is cancelled

    Args:
        settings: Optional custom settings

    Raises:
        BridgeError: If the bridge cannot start
    """
    controller = BridgeController(settings)

    try:
        # Connecting blocks on the websocket handshake
        await asyncio.to_thread(controller.start)

        # The OSC server and the feedback worker run on their own threads
        while controller.running:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        pass
    finally:
        controller.stop()


def main() -> int:
    """Main entry point

    Returns:
        Exit code
    """
    try:
        settings = get_settings()
    except Exception:
        return 1

    try:
        asyncio.run(run_bridge(settings))
        return 0
    except KeyboardInterrupt:
        logger.info("Bridge stopped by user")
        return 0
    except Exception as e:
        logger.exception(f"Bridge terminated with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
