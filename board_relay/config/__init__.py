"""
Board Relay Configuration.

Environment variables, settings, and logging configuration.
"""

from board_relay.config.logging_config import configure_logging
from board_relay.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
