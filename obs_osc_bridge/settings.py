"""
Settings configuration for the OBS OSC bridge.

This module provides configuration settings using Pydantic for validation.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Calibration:
    """Affine constants mapping controller values onto the OBS canvas."""

    canvas_center_x: float = 960.0
    canvas_center_y: float = 540.0
    pad_scale: float = 2000.0
    pad_offset_x: float = 540.0
    pad_offset_y: float = 960.0


class Settings(BaseSettings):
    """
    Application settings with validation.

    Attributes:
        app_name (str): The application name identifier.
        root_dir (Path): The root directory of the application.
        log_level (str): The logging level (e.g., ERROR, WARN, INFO, DEBUG).
        obs_host (str): Host of the obs-websocket server.
        obs_port (int): Port of the obs-websocket server.
        obs_password (str): Password of the obs-websocket server.
        obs_connect_attempts (int): Connection attempts made at startup.
        request_timeout (float): Seconds to wait for any single OBS request.
        osc_listen_host (str): Address the inbound OSC server binds to.
        osc_listen_port (int): Port the inbound OSC server listens on.
        osc_feedback_host (str): Host receiving cue feedback (e.g. QLab).
        osc_feedback_port (int): Port receiving cue feedback.
        feedback_enabled (bool): Send OBS scene changes back out as OSC cues.
    """

    app_name: str = "obs-osc-bridge"
    root_dir: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent.parent
    )
    log_level: str = Field("INFO", description="The logging level.")

    # OBS settings
    obs_host: str = Field(default="127.0.0.1", description="obs-websocket host")
    obs_port: int = Field(default=4455, description="obs-websocket port")
    obs_password: str = Field(default="", description="obs-websocket password")
    obs_connect_attempts: int = Field(
        default=3, ge=1, description="Connection attempts at startup"
    )
    request_timeout: float = Field(
        default=5.0, gt=0, description="Timeout for a single OBS request in seconds"
    )

    # OSC settings
    osc_listen_host: str = Field(
        default="0.0.0.0", description="Address to listen for OSC messages on"
    )
    osc_listen_port: int = Field(
        default=3333, description="Port to listen for OSC messages on"
    )
    osc_feedback_host: str = Field(
        default="127.0.0.1", description="Host to send OSC feedback to"
    )
    osc_feedback_port: int = Field(
        default=53000, description="Port to send OSC feedback to"
    )
    feedback_enabled: bool = Field(
        default=False, description="Send OBS scene changes out as OSC cues"
    )

    # Canvas calibration
    canvas_center_x: float = Field(default=960.0)
    canvas_center_y: float = Field(default=540.0)
    pad_scale: float = Field(default=2000.0)
    pad_offset_x: float = Field(default=540.0)
    pad_offset_y: float = Field(default=960.0)

    class Config:
        """Configuration for settings behavior."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "OBS_OSC_"
        case_sensitive = False

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is a recognized value.

        Args:
            v: The log level value

        Returns:
            The validated log level

        Raises:
            ValueError: If log level is not valid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {', '.join(valid_levels)}")
        return v.upper()

    @field_validator("app_name")
    def validate_app_name(cls, v: str) -> str:
        """Validate the app name is not empty."""
        if not v.strip():
            raise ValueError("app_name must not be empty")
        return v

    @field_validator("obs_port", "osc_listen_port", "osc_feedback_port")
    def validate_port(cls, v: int) -> int:
        """Validate a port number is in the UDP/TCP range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        log_level = getattr(logging, self.log_level)
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logger.info(f"Logging configured with level {self.log_level}")

    @property
    def calibration(self) -> Calibration:
        """Canvas calibration constants as a single value object."""
        return Calibration(
            canvas_center_x=self.canvas_center_x,
            canvas_center_y=self.canvas_center_y,
            pad_scale=self.pad_scale,
            pad_offset_x=self.pad_offset_x,
            pad_offset_y=self.pad_offset_y,
        )

    @property
    def env_file_path(self) -> Optional[Path]:
        """Get the path to the loaded .env file.

        Returns:
            Path to the .env file if it exists, None otherwise
        """
        env_file = self.root_dir / self.Config.env_file
        return env_file if env_file.exists() else None


def get_settings() -> Settings:
    """Get application settings from environment.

    Returns:
        Configured Settings instance
    """
    try:
        settings = Settings()
        settings.configure_logging()
        return settings
    except Exception as e:
        logger.error(f"Error loading settings: {e}")
        raise
