"""Configuration constants for dirtree."""

import os
from pathlib import Path

# Directory holding the database when neither --db nor DIRTREE_DB is given.
DEFAULT_DATA_DIR: Path = Path("~/.local/share/dirtree").expanduser()

DB_FILENAME: str = "dirtree.db"

# Environment variable overriding the database location.
DB_ENV_VAR: str = "DIRTREE_DB"

# Environment variable selecting the log level when --verbose is not given.
LOG_LEVEL_ENV_VAR: str = "DIRTREE_LOG_LEVEL"

MEMORY_DB: str = ":memory:"


def resolve_db_path(explicit: Path | str | None = None) -> Path | str:
    """Return the database location: explicit path, then $DIRTREE_DB, then the default.

    ``:memory:`` is returned as-is.
    """
    candidate = explicit if explicit is not None else os.environ.get(DB_ENV_VAR)
    if candidate is not None and str(candidate) == MEMORY_DB:
        return MEMORY_DB
    if candidate:
        return Path(candidate).expanduser()
    return DEFAULT_DATA_DIR / DB_FILENAME
