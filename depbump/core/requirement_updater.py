"""Requirement rewriting for a target version.

Given the requirements of a dependency and the version it is moving to,
:class:`RequirementsUpdater` produces the requirements the manifest files
should carry afterwards. The rules, applied per requirement:

1. Transitive requirements are left alone unless the update fixes a
   vulnerability; the direct declaration elsewhere is authoritative.
2. Multi-clause ranges (anything with a comma) are left alone.
3. Wildcards keep their precision: ``1.2.*`` moving to ``1.4.0`` becomes
   ``1.4.*``; ``*`` and ``*-*`` already match everything.
4. Anything else is treated as a pin: the first version-shaped substring
   is replaced by the target version, nothing else in the string moves.

The updater never raises; ambiguous input comes back unchanged. Output
order mirrors input order index for index: ``requirements[i]`` pairs
with ``previous_requirements[i]``.

Typical usage::

    from depbump.core.requirement_updater import rewrite_requirements

    updated = rewrite_requirements(dependency.requirements, "1.4.0")
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional, Sequence

from depbump.constants import (
    MATCH_ALL_WILDCARDS,
    RANGE_SEPARATOR,
    VERSION_PATTERN,
    WILDCARD,
)
from depbump.models.dependency import Dependency, DependencyDetails, Requirement
from depbump.utils.logger import get_logger
from depbump.utils.version_utils import EcosystemVersion, get_update_type

logger = get_logger("core.requirement_updater")

_VERSION_RE = re.compile(VERSION_PATTERN)
_SEGMENT_SEPARATOR = re.compile(r"[.\-]")
_WILDCARD_SUFFIX = re.compile(r"[.\-]\*")

__all__ = ["RequirementsUpdater", "rewrite_requirements", "update_dependency"]


class RequirementsUpdater:
    """Rewrite a dependency's requirements for one target version.

    Holds no state beyond its constructor arguments; instances are cheap
    and may be created per call.

    Args:
        requirements: Requirements before the update, in file order.
        target_version: Version to move to; ``None`` leaves everything
            unchanged.
        dependency_details: Extra facts about the target release. An
            ``info_url`` replaces the source of each rewritten requirement.
        vulnerable: Whether the update is security-motivated; only then
            are transitive requirements rewritten.

    Example::

        >>> updater = RequirementsUpdater(reqs, "2.0.1")
        >>> [r.requirement for r in updater.updated_requirements()]
        ['2.0.1', '2.*']
    """

    def __init__(
        self,
        requirements: Sequence[Requirement],
        target_version: Optional[str],
        *,
        dependency_details: Optional[DependencyDetails] = None,
        vulnerable: bool = False,
    ) -> None:
        self.requirements = list(requirements)
        self.dependency_details = dependency_details
        self.vulnerable = vulnerable
        self.target_version = self._parse_target(target_version, dependency_details)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def updated_requirements(self) -> List[Requirement]:
        """Return the rewritten requirements, positionally aligned."""
        if self.target_version is None:
            return list(self.requirements)

        return [self.update_requirement(req) for req in self.requirements]

    def update_requirement(self, requirement: Requirement) -> Requirement:
        """Rewrite a single requirement, or return it unchanged."""
        if self.target_version is None:
            return requirement

        if requirement.is_transitive and not self.vulnerable:
            return requirement

        previous = requirement.requirement
        if previous is None or RANGE_SEPARATOR in previous:
            return requirement

        if WILDCARD in previous:
            new_string = self._update_wildcard_requirement(previous)
        else:
            new_string = _VERSION_RE.sub(str(self.target_version), previous, count=1)

        if new_string == previous:
            return requirement

        logger.debug(
            "Rewrote requirement in %s: %r -> %r", requirement.file, previous, new_string
        )
        return requirement.with_requirement(new_string, source=self._new_source(requirement))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_target(
        target_version: Optional[str],
        dependency_details: Optional[DependencyDetails],
    ) -> Optional[EcosystemVersion]:
        value = target_version
        if value is None and dependency_details is not None:
            value = dependency_details.version
        if not EcosystemVersion.is_valid(value):
            if value:
                logger.debug("Ignoring target version %r: not version-shaped", value)
            return None
        return EcosystemVersion(value)  # type: ignore[arg-type]

    def _update_wildcard_requirement(self, req_string: str) -> str:
        """Rewrite a wildcard requirement, preserving its precision."""
        if req_string in MATCH_ALL_WILDCARDS:
            return req_string

        head = req_string.split(WILDCARD, 1)[0]
        parts = _SEGMENT_SEPARATOR.split(head)
        while parts and parts[-1] == "":
            parts.pop()
        precision = len(parts)
        if precision == 0:
            return req_string

        suffix_match = _WILDCARD_SUFFIX.search(req_string)
        wildcard_section = req_string[suffix_match.start():] if suffix_match else ""

        segments = self.target_version.segments[:precision]  # type: ignore[union-attr]
        if not segments:
            return req_string

        return ".".join(str(segment) for segment in segments) + wildcard_section

    def _new_source(self, requirement: Requirement):
        if self.dependency_details is not None:
            origin = self.dependency_details.origin()
            if origin is not None:
                return origin
        return requirement.source


def rewrite_requirements(
    requirements: Sequence[Requirement],
    target_version: Optional[str],
    *,
    dependency_details: Optional[DependencyDetails] = None,
    vulnerable: bool = False,
) -> List[Requirement]:
    """Functional form of :meth:`RequirementsUpdater.updated_requirements`."""
    return RequirementsUpdater(
        requirements,
        target_version,
        dependency_details=dependency_details,
        vulnerable=vulnerable,
    ).updated_requirements()


def update_dependency(
    dependency: Dependency,
    target_version: str,
    *,
    dependency_details: Optional[DependencyDetails] = None,
    vulnerable: bool = False,
) -> Dependency:
    """Return ``dependency`` moved to ``target_version``.

    The current version and requirements become the ``previous_*`` values
    and the requirements are rewritten with :func:`rewrite_requirements`.
    This is the shape file updaters and the change builder expect.
    """
    requirements = rewrite_requirements(
        dependency.requirements,
        target_version,
        dependency_details=dependency_details,
        vulnerable=vulnerable,
    )

    logger.info(
        "Updating %s from %s to %s (%s)",
        dependency.name,
        dependency.version or "<unknown>",
        target_version,
        get_update_type(dependency.version, target_version),
    )

    return replace(
        dependency,
        version=target_version,
        previous_version=dependency.version,
        requirements=tuple(requirements),
        previous_requirements=dependency.requirements,
    )
