"""
Version helpers for depbump.

Requirement strings come from many ecosystems, so versions are handled
in two ways:

- :class:`EcosystemVersion` keeps the version exactly as the ecosystem
  writes it (``1.2.3-beta.1``) and exposes its numeric release segments.
  This is what gets substituted into requirement strings.
- :func:`get_update_type` classifies the size of a change using PEP 440
  parsing where the versions allow it. It is informational only.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version, parse

from depbump.constants import VERSION_PATTERN

_FULL_VERSION = re.compile(rf"^v?(?P<version>{VERSION_PATTERN})$")


class EcosystemVersion:
    """A version string in its ecosystem's own syntax.

    Args:
        value: Raw version, optionally prefixed with ``v``.

    Raises:
        ValueError: ``value`` is not version-shaped.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        match = _FULL_VERSION.match(value.strip())
        if not match:
            raise ValueError(f"Invalid version string: {value!r}")
        self._value = match.group("version")

    @classmethod
    def is_valid(cls, value: Optional[str]) -> bool:
        """Return True if ``value`` can be parsed."""
        return bool(value) and _FULL_VERSION.match(value.strip()) is not None

    @property
    def release(self) -> str:
        """The release part, without pre-release label or build metadata."""
        return re.split(r"[-+]", self._value, maxsplit=1)[0]

    @property
    def segments(self) -> List[int]:
        """Leading numeric segments of the release part."""
        numbers: List[int] = []
        for part in self.release.split("."):
            if not part.isdigit():
                break
            numbers.append(int(part))
        return numbers

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"EcosystemVersion({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EcosystemVersion):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Version before the update, or ``None``.
        target_version: Version after the update.

    Returns:
        One of ``"new"``, ``"same"``, ``"downgrade"``, ``"major"``,
        ``"minor"``, ``"patch"``, ``"update"`` or ``"unknown"``.

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    try:
        current = _parse_version(current_version)
        target = _parse_version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _parse_version(value: str) -> Version:
    parsed = parse(value)
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)
    return parsed


def _classify_upgrade(current: Version, target: Version) -> str:
    current_release = _normalize_release(current)
    target_release = _normalize_release(target)

    for label, before, after in zip(
        ("major", "minor", "patch"), current_release, target_release
    ):
        if before != after:
            return label

    # Pre-release to release, or metadata-only change
    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = tuple(version.release) + (0, 0, 0)
    return release[0], release[1], release[2]
