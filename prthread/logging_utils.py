"""Logging configuration helpers."""

from __future__ import annotations

import logging


def configure_logging(level: str = "INFO") -> None:
    normalized = level.upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # slack_sdk logs full request bodies at DEBUG.
    if normalized != "DEBUG":
        logging.getLogger("slack_sdk").setLevel(logging.WARNING)
