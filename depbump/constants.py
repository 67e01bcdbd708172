"""
Centralized constants for depbump.

This module defines immutable configuration values used across depbump,
including version patterns, classification defaults, configuration file
names, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Version constraint syntax
# ---------------------------------------------------------------------------

#: Regular expression matching a single version inside a constraint string:
#: numeric release, optional pre-release label and optional build metadata.
VERSION_PATTERN: Final[str] = (
    r"[0-9]+(?:\.[0-9a-zA-Z]+)*"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9a-zA-Z-]+)*)?"
    r"(?:\+[0-9a-zA-Z\-.]+)?"
)

#: Marker for wildcard segments in a requirement string.
WILDCARD: Final[str] = "*"

#: Wildcard requirements that already match every version.
MATCH_ALL_WILDCARDS: Final[Sequence[str]] = ("*", "*-*")

#: Separator between clauses of a multi-clause range.
RANGE_SEPARATOR: Final[str] = ","

#: Source type recorded when an explicit origin replaces a requirement source.
DEFAULT_SOURCE_TYPE: Final[str] = "registry"

# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

#: Classification pass order: exact codes first, freeform patterns second.
ORDER_CODES_FIRST: Final[str] = "codes-first"

#: Classification pass order: freeform patterns first, exact codes second.
ORDER_PATTERNS_FIRST: Final[str] = "patterns-first"

#: Whether unrecognized output is reported as a failure by the CLI.
DEFAULT_UNCLASSIFIED_IS_FAILURE: Final[bool] = False

# ---------------------------------------------------------------------------
# Configuration discovery
# ---------------------------------------------------------------------------

#: Dedicated configuration file name.
CONFIG_FILE_NAME: Final[str] = "depbump.toml"

#: Environment variable holding an explicit configuration path.
CONFIG_ENV_VAR: Final[str] = "DEPBUMP_CONFIG"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
