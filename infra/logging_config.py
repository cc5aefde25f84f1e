"""
Logging setup for command-line entry points.

Library modules only ever call `logging.getLogger(__name__)`; the scripts
call `setup_logging()` once at start-up. Prefect flows log through
`get_run_logger()` instead and do not need this.
"""

import logging
import os
import sys
import time


class TextFormatter(logging.Formatter):
    """Plain text lines with UTC timestamps."""
    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__("%(asctime)sZ | %(levelname)s | %(name)s | %(message)s")


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger.

    Env vars:
      - WAREHOUSE_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default INFO)

    A handler is only added when the root logger has none yet, so an
    embedding application keeps its own configuration.
    """
    level_name = (level or os.getenv("WAREHOUSE_LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(TextFormatter())
        root.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
