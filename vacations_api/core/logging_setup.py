"""Root logger configuration for the API process."""
from __future__ import annotations

import logging

from .config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def configure_logging() -> None:
    """Configure the root logger once, at the level named by LOG_LEVEL."""
    global _configured
    if _configured:
        return
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=_FORMAT)
    _configured = True
