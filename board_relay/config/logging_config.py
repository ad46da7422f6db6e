"""
Board Relay - Logging Configuration

Applies the configured log level to the root logger once at startup.
"""

import logging

from board_relay.config.settings import Settings

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> int:
    """Configure root logging from settings and return the effective level."""
    level_name = "DEBUG" if settings.debug else settings.log_level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {settings.log_level!r}.")

    logging.basicConfig(level=level, format=_LOG_FORMAT, force=True)

    # python-socketio and engineio are chatty at INFO
    for noisy in ("socketio", "engineio"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return level
