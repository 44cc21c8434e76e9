"""
config.py - runtime settings and logger wiring

Settings are read from environment variables so the embedding service can
tune them without code changes:
  - GROUPSPLIT_MAX_PARTICIPANTS: participants per group, owner included (default 4)
  - GROUPSPLIT_LOG_LEVEL: level for package loggers (default INFO)
  - GROUPSPLIT_CURRENCY: ISO code used when formatting reports (default USD)
"""

from dataclasses import dataclass
from typing import Optional
import logging
import os

DEFAULT_MAX_PARTICIPANTS = 4
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CURRENCY = "USD"

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


@dataclass
class Settings:
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
    log_level: str = DEFAULT_LOG_LEVEL
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def from_env() -> "Settings":
        """
        Build settings from the environment. Bad values are logged and replaced
        by defaults so a typo never prevents the service from starting.
        """
        # plain getLogger: get_logger itself calls from_env
        log = logging.getLogger(__name__)

        raw_max = (os.getenv("GROUPSPLIT_MAX_PARTICIPANTS") or "").strip()
        max_participants = DEFAULT_MAX_PARTICIPANTS
        if raw_max:
            try:
                max_participants = int(raw_max)
            except ValueError:
                log.warning("Ignoring non-integer GROUPSPLIT_MAX_PARTICIPANTS=%r", raw_max)
            else:
                if max_participants < 1:
                    log.warning("GROUPSPLIT_MAX_PARTICIPANTS must be >= 1, got %d", max_participants)
                    max_participants = DEFAULT_MAX_PARTICIPANTS

        log_level = (os.getenv("GROUPSPLIT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            log.warning("Unknown GROUPSPLIT_LOG_LEVEL=%r, using %s", log_level, DEFAULT_LOG_LEVEL)
            log_level = DEFAULT_LOG_LEVEL

        currency = (os.getenv("GROUPSPLIT_CURRENCY") or DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY
        return Settings(max_participants=max_participants, log_level=log_level, currency=currency)


def get_logger(name: str, settings: Optional[Settings] = None) -> logging.Logger:
    """
    Return the module logger, attaching a stream handler the first time.
    Level comes from settings.log_level (GROUPSPLIT_LOG_LEVEL by default).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        settings = settings or Settings.from_env()
        level = logging.getLevelName(settings.log_level.upper())
        logger.setLevel(level if isinstance(level, int) else logging.INFO)
    return logger


# gives the from_env warnings above a handler
logger = get_logger(__name__)
