"""
Tests for the main application module.
"""

from unittest.mock import MagicMock, patch

import pytest

from obs_osc_bridge.app import main, run_bridge
from obs_osc_bridge.exceptions import StudioConnectionError


@pytest.fixture
def mock_get_settings():
    with patch("obs_osc_bridge.app.get_settings") as mock:
        yield mock


def test_main_runs_bridge(mock_get_settings):
    """Test that run_bridge is run from main()."""
    with patch("obs_osc_bridge.app.asyncio.run") as mock_asyncio_run:
        result = main()

        mock_asyncio_run.assert_called_once()
        mock_asyncio_run.call_args[0][0].close()
        assert result == 0


def test_main_keyboard_interrupt(mock_get_settings):
    """Test main() handling KeyboardInterrupt."""
    with patch("obs_osc_bridge.app.asyncio.run", side_effect=KeyboardInterrupt):
        with patch("obs_osc_bridge.app.run_bridge", new=MagicMock()):
            assert main() == 0


def test_main_exception(mock_get_settings):
    """Test main() handling general exceptions."""
    with patch(
        "obs_osc_bridge.app.asyncio.run",
        side_effect=StudioConnectionError(details="refused"),
    ):
        with patch("obs_osc_bridge.app.run_bridge", new=MagicMock()):
            assert main() == 1


def test_main_invalid_settings():
    with patch("obs_osc_bridge.app.get_settings", side_effect=ValueError("bad port")):
        assert main() == 1


@pytest.mark.asyncio
async def test_run_bridge_stops_controller_when_it_stops_running():
    with patch("obs_osc_bridge.app.BridgeController") as mock_controller_class:
        controller = mock_controller_class.return_value
        controller.running = False

        await run_bridge(MagicMock())

        controller.start.assert_called_once()
        controller.stop.assert_called_once()


@pytest.mark.asyncio
async def test_run_bridge_stops_controller_when_start_fails():
    with patch("obs_osc_bridge.app.BridgeController") as mock_controller_class:
        controller = mock_controller_class.return_value
        controller.start.side_effect = StudioConnectionError(details="refused")

        with pytest.raises(StudioConnectionError):
            await run_bridge(MagicMock())

        controller.stop.assert_called_once()
