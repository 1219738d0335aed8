"""Logging setup for the command line.

Levels (inclusive):
- ERROR: only errors that are not reported as a command failure
- WARNING: default; cleanup problems and remote URL mismatches
- INFO: informational messages
- DEBUG: every external command that is run

``--verbose`` selects DEBUG; otherwise the ``PR_WORKTREE_LOG_LEVEL``
environment variable is used, falling back to WARNING.
"""

from __future__ import annotations

import logging
import os

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "WARNING"
DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"
LEVEL_ENV = "PR_WORKTREE_LOG_LEVEL"


def resolve_level(level: str | None) -> int:
    """Map level name to logging constant; unknown names fall back to WARNING."""
    if not level:
        return LEVELS[DEFAULT_LEVEL]
    return LEVELS.get(level.upper().strip(), LEVELS[DEFAULT_LEVEL])


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger to write to stderr."""
    level = logging.DEBUG if verbose else resolve_level(os.environ.get(LEVEL_ENV))
    logging.basicConfig(level=level, format=DEFAULT_FORMAT, force=True)
