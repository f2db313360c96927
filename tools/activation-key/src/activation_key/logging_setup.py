"""
Logging configuration for the activation-key commands.

Provides a file handler (always DEBUG) and a console handler (WARNING
by default, DEBUG when verbose).
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

from .config import PROJECT_ROOT

__all__ = ["LOG_DIR", "setup_logging"]

LOG_DIR = os.path.join(PROJECT_ROOT, "logs")


def setup_logging(
    verbose: bool = False,
    log_prefix: str = "activation_key",
    log_dir: str | None = None,
) -> str:
    """Configure the root logger for a CLI run.

    - File handler: DEBUG level, writes to <log_dir>/<prefix>_<timestamp>.log
    - Console handler: WARNING+ on stderr, DEBUG when *verbose* is True.

    Token contents and key material are never logged, so the debug file is
    safe to attach to a support request.

    Returns the path to the log file.
    """
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    log_path = os.path.join(log_dir, f"{log_prefix}_{timestamp}.log")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(
        "%(levelname)-8s  %(message)s" if not verbose
        else "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    ))
    root_logger.addHandler(console_handler)

    return log_path
