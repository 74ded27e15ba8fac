"""
logging_config.py — Centralized logging for the payment backend.

All modules log through loggers obtained from `get_logger(__name__)` so that
output shares one format on stdout (container friendly).
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configures the root logger once for the application.

    Third-party HTTP client loggers are reduced to WARNING so that every
    outbound gateway call does not produce a line of its own.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
