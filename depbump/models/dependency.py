"""
Dependency and requirement data models for depbump.

A :class:`Dependency` is one package in one ecosystem; each of its
:class:`Requirement` entries is the constraint it carries in one file.
Requirement strings are opaque here: only
:mod:`depbump.core.requirement_updater` understands their syntax.

All models are frozen. An update produces new values, the old ones are
kept as ``previous_*`` for diffing and auditing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from depbump.constants import DEFAULT_SOURCE_TYPE


@dataclass(frozen=True)
class RequirementSource:
    """Registry or origin metadata attached to a requirement.

    Attributes:
        type: Source kind, e.g. ``"registry"`` or ``"git"``.
        url: Origin URL, if known.
    """

    type: str
    url: Optional[str] = None

    def to_json(self) -> Dict[str, Optional[str]]:
        """Return a JSON-serializable representation."""
        return {"type": self.type, "url": self.url}


@dataclass(frozen=True)
class Requirement:
    """A version constraint on a dependency in a single file.

    Attributes:
        file: Name of the file declaring the constraint.
        requirement: Constraint in the ecosystem's own syntax, or ``None``
            when the file does not constrain the version.
        groups: Group labels (``dependencies``, ``devDependencies``...).
        source: Optional registry/origin metadata.
        is_transitive: True if the dependency is not declared directly
            in ``file``.
        previous_requirement: Constraint before the last rewrite; set by
            the requirement updater when it changes the string.
    """

    file: str
    requirement: Optional[str]
    groups: Tuple[str, ...] = ()
    source: Optional[RequirementSource] = None
    is_transitive: bool = False
    previous_requirement: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", tuple(self.groups))

    def with_requirement(
        self,
        requirement: str,
        *,
        source: Optional[RequirementSource] = None,
    ) -> "Requirement":
        """Return a copy constrained by ``requirement``.

        The current string is recorded as ``previous_requirement``.
        """
        return replace(
            self,
            requirement=requirement,
            source=source,
            previous_requirement=self.requirement,
        )

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "file": self.file,
            "requirement": self.requirement,
            "groups": list(self.groups),
            "source": self.source.to_json() if self.source else None,
            "is_transitive": self.is_transitive,
            "previous_requirement": self.previous_requirement,
        }

    def __str__(self) -> str:
        return f"{self.file}: {self.requirement or '<none>'}"


@dataclass(frozen=True)
class DependencyDetails:
    """What the update checker learned about the target release.

    Attributes:
        version: Target version, or ``None`` when there is nothing to pin.
        info_url: Explicit origin of the target release; when set it
            replaces the source of every rewritten requirement.
        source_type: Source type recorded alongside ``info_url``.
    """

    version: Optional[str] = None
    info_url: Optional[str] = None
    source_type: str = DEFAULT_SOURCE_TYPE

    def origin(self) -> Optional[RequirementSource]:
        """Return the explicit origin as a source, if one is known."""
        if not self.info_url:
            return None
        return RequirementSource(type=self.source_type, url=self.info_url)


@dataclass(frozen=True)
class Dependency:
    """A dependency of one package manager, before or after an update.

    Identity is ``(name, package_manager)``; see :attr:`key`.

    Attributes:
        name: Package name as the ecosystem spells it.
        package_manager: Package manager identifier (``npm_and_yarn``...).
        version: Current (or target, after an update) version.
        previous_version: Version before the update.
        requirements: Constraints per file, in file order.
        previous_requirements: Constraints before the update, positionally
            matching ``requirements``.
    """

    name: str
    package_manager: str
    version: Optional[str] = None
    previous_version: Optional[str] = None
    requirements: Tuple[Requirement, ...] = ()
    previous_requirements: Tuple[Requirement, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "requirements", tuple(self.requirements))
        object.__setattr__(
            self, "previous_requirements", tuple(self.previous_requirements)
        )

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the dependency."""
        return (self.name, self.package_manager)

    @property
    def files(self) -> Tuple[str, ...]:
        """Names of the files this dependency is declared in, in order."""
        seen: Dict[str, None] = {}
        for req in self.requirements:
            seen.setdefault(req.file, None)
        return tuple(seen)

    def requirements_for(self, file_name: str) -> Tuple[Requirement, ...]:
        """Return the requirements declared in ``file_name``."""
        return tuple(req for req in self.requirements if req.file == file_name)

    def requirement_changes(self) -> Iterable[Tuple[Requirement, Requirement]]:
        """Yield ``(previous, updated)`` pairs whose strings differ."""
        for previous, updated in zip(self.previous_requirements, self.requirements):
            if previous.requirement != updated.requirement:
                yield previous, updated

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "package_manager": self.package_manager,
            "version": self.version,
            "previous_version": self.previous_version,
            "requirements": [req.to_json() for req in self.requirements],
            "previous_requirements": [
                req.to_json() for req in self.previous_requirements
            ],
        }

    def __str__(self) -> str:
        if self.previous_version and self.version:
            return f"{self.name} {self.previous_version} -> {self.version}"
        return f"{self.name} {self.version or ''}".rstrip()
