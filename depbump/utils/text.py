"""
Text normalization helpers for raw package-manager output.

Native tools colour their diagnostics with ANSI escape sequences and
sometimes wrap lines with CI grouping markers. Everything that matches or
renders that output goes through :func:`strip_ansi` exactly once, so rule
tables can be written against plain text.
"""

from __future__ import annotations

import re
from typing import Optional

# CSI sequences (colours, cursor movement) and OSC sequences (hyperlinks,
# window titles) terminated by BEL or ST.
_ANSI_ESCAPE = re.compile(
    r"""
    \x1b
    (?:
        \[[0-?]*[ -/]*[@-~]
      | \][^\x07\x1b]*(?:\x07|\x1b\\)
      | [@-Z\\-_]
    )
    """,
    re.VERBOSE,
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from ``text``.

    Examples:
        >>> strip_ansi("\\x1b[31mfailed\\x1b[0m")
        'failed'
    """
    if "\x1b" not in text:
        return text
    return _ANSI_ESCAPE.sub("", text)


def first_line(text: str) -> str:
    """Return the first non-blank line of ``text``, stripped."""
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def strip_scheme(url: str) -> str:
    """Drop a leading ``http://`` or ``https://`` from ``url``."""
    return re.sub(r"^[a-z][a-z0-9+.-]*://", "", url.strip(), flags=re.IGNORECASE)


def basename(path: str) -> str:
    """Return the last component of a POSIX or Windows path."""
    return re.split(r"[\\/]", path.strip().rstrip("\\/"))[-1]


def excerpt(text: Optional[str], max_length: int = 120) -> str:
    """Single-line preview of ``text`` for log messages."""
    if not text:
        return ""
    flat = " ".join(strip_ansi(text).split())
    if len(flat) <= max_length:
        return flat
    return flat[:max_length] + "..."
