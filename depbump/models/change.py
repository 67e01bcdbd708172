"""
Change set data models for depbump.

This module defines what an update attempt produces (a
:class:`DependencyChange`) and what it was started from (a
:data:`ChangeSource`: a lead dependency or a dependency group).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Dict, Iterator, Mapping, Sequence, Tuple, Union

from depbump.exceptions import NoChangesError
from depbump.models.dependency import Dependency
from depbump.models.dependency_file import DependencyFile


@dataclass(frozen=True)
class DependencyGroup:
    """A named bundle of dependencies updated together.

    Args:
        name: Group name as configured by the user.
        rules: Match rules; ``rules["patterns"]`` holds name globs and
            ``rules["exclude-patterns"]`` optional exclusions.
    """

    name: str
    rules: Mapping[str, Sequence[str]] = field(default_factory=dict)

    @property
    def patterns(self) -> Tuple[str, ...]:
        """Name globs selecting group members."""
        return tuple(self.rules.get("patterns", ()))

    @property
    def exclude_patterns(self) -> Tuple[str, ...]:
        """Name globs removing members the patterns selected."""
        return tuple(self.rules.get("exclude-patterns", ()))

    def matches(self, dependency: Union[Dependency, str]) -> bool:
        """Return True if ``dependency`` belongs to this group.

        A group without patterns matches every dependency.
        """
        name = dependency if isinstance(dependency, str) else dependency.name
        if any(fnmatchcase(name, pattern) for pattern in self.exclude_patterns):
            return False
        if not self.patterns:
            return True
        return any(fnmatchcase(name, pattern) for pattern in self.patterns)

    def __hash__(self) -> int:
        return hash((self.name, self.patterns, self.exclude_patterns))


#: What started an update: a single lead dependency or a dependency group.
ChangeSource = Union[Dependency, DependencyGroup]


@dataclass(frozen=True)
class DependencyChange:
    """The packaged result of one update attempt.

    Construction fails with :class:`~depbump.exceptions.NoChangesError`
    when no updated file is given; an update that changes nothing is a
    failure, not an empty success.

    Attributes:
        updated_dependencies: Dependencies the files now reflect.
        updated_dependency_files: Files whose content changed.
        grouped: True when the change came from a dependency group.
    """

    updated_dependencies: Tuple[Dependency, ...]
    updated_dependency_files: Tuple[DependencyFile, ...]
    grouped: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "updated_dependencies", tuple(self.updated_dependencies)
        )
        object.__setattr__(
            self, "updated_dependency_files", tuple(self.updated_dependency_files)
        )
        if not self.updated_dependency_files:
            package_managers = {dep.package_manager for dep in self.updated_dependencies}
            raise NoChangesError(
                package_manager=", ".join(sorted(package_managers)) or None,
                dependency_names=[dep.name for dep in self.updated_dependencies],
            )

    @property
    def is_grouped_update(self) -> bool:
        """Whether this change came from a dependency group."""
        return self.grouped

    @property
    def updated_file_names(self) -> Tuple[str, ...]:
        """Names of the changed files, in order."""
        return tuple(f.name for f in self.updated_dependency_files)

    def file(self, name: str) -> DependencyFile:
        """Return the changed file called ``name``.

        Raises:
            KeyError: No changed file has that name.
        """
        for dependency_file in self.updated_dependency_files:
            if dependency_file.name == name:
                return dependency_file
        raise KeyError(name)

    def __iter__(self) -> Iterator[DependencyFile]:
        return iter(self.updated_dependency_files)

    def __len__(self) -> int:
        return len(self.updated_dependency_files)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "grouped": self.grouped,
            "updated_dependencies": [d.to_json() for d in self.updated_dependencies],
            "updated_dependency_files": [
                f.to_json() for f in self.updated_dependency_files
            ],
        }
