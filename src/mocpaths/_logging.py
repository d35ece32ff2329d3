"""Logging setup for the mocpaths CLI.

Library modules only create loggers (``log = logging.getLogger(__name__)``);
handlers are attached here, once, by the command-line entry point.

MOCPATHS_LOG_LEVEL selects what reaches stderr:
    - DEBUG: notes indexed per vault scan, cache clears, unresolved link
      references and the number of paths found for a note
    - INFO: watcher start/stop and change batches (default)
    - WARNING: frontmatter values that are not links, link resolution
      failures, notes indexed without metadata, rejected setting values
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "MOCPATHS_LOG_LEVEL"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stderr handler to the ``mocpaths`` logger.

    ``level`` overrides the environment variable. Repeated calls leave the
    existing handler in place.
    """
    package_logger = logging.getLogger("mocpaths")
    if package_logger.handlers:
        return

    level_name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger.setLevel(resolved)
    package_logger.addHandler(handler)
    package_logger.propagate = False
