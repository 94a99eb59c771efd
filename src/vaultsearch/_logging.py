"""Logging configuration for vaultsearch.

This module provides consistent logging across the codebase.

Usage in other modules:
    import logging
    log = logging.getLogger(__name__)

    log.debug("Skipped an unreadable note")
    log.info("General operational info")
    log.warning("Unexpected but handled situation")

The log level can be configured via the VAULTSEARCH_LOG_LEVEL environment variable:
    - DEBUG: Detailed debugging information (including skipped documents)
    - INFO: General operational messages (default)
    - WARNING: Unexpected situations that were handled
    - ERROR: Errors that prevented an operation
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "VAULTSEARCH_LOG_LEVEL"


def configure_logging() -> None:
    """Configure logging for the vaultsearch package.

    Call this once at application startup (the CLI does it).
    Subsequent calls are no-ops.
    """
    package_logger = logging.getLogger("vaultsearch")

    if package_logger.handlers:
        return

    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(name)s: %(message)s"))

    package_logger.setLevel(level)
    package_logger.addHandler(handler)

    # Avoid duplicate messages through the root logger
    package_logger.propagate = False
