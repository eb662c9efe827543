"""Root logger configuration for the CLI."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric_level)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    # Request-level chatter from the HTTP client is noise at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
