"""
Logging configuration helpers.
The CLI calls `configure_logging` once with its loaded settings; modules only create named loggers.
"""

from __future__ import annotations

import logging

from campaign_planner.common.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# Transport chatter stays quiet unless the whole process runs at DEBUG.
NOISY_LOGGERS = ("urllib3", "requests")

_LOGGING_CONFIGURED = False


def configure_logging(settings: Settings | None = None) -> None:
    """Configure process-wide logging once, defaulting to the cached settings."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("campaign_planner").debug(
        "Logging configured for %s (%s)", settings.PROJECT_NAME, settings.ENV
    )
    _LOGGING_CONFIGURED = True
