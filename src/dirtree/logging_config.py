"""Logging configuration for dirtree."""

import os
import sys

from loguru import logger

from dirtree.config import LOG_LEVEL_ENV_VAR


def configure_logging(*, verbose: bool = False) -> None:
    """Configure loguru for the CLI and the MCP server.

    ``--verbose`` selects DEBUG; otherwise ``$DIRTREE_LOG_LEVEL`` or INFO.
    Logs go to stderr so stdout stays clean for ``--json`` output and the
    MCP stdio transport.
    """
    logger.remove()
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
