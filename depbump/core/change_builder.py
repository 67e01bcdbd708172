"""Assemble the result of an update attempt into a :class:`DependencyChange`.

The builder runs the ecosystem's file updater once per update unit (a
lead dependency or a dependency group), keeps only the files whose
content actually changed, and packages them with the updated
dependencies. An attempt that changes nothing fails loudly with
:class:`~depbump.exceptions.NoChangesError`; whatever the file updater
raises propagates unchanged.

Typical usage::

    from depbump.core.change_builder import DependencyChangeBuilder

    change = DependencyChangeBuilder.create_from(
        job=job,
        dependency_files=files,
        updated_dependencies=[update_dependency(dep, "1.2.0")],
        change_source=dep,
    )
    for updated_file in change.updated_dependency_files:
        ...
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from depbump.core.registry import EcosystemRegistry, default_registry
from depbump.exceptions import NoChangesError
from depbump.models.change import ChangeSource, DependencyChange, DependencyGroup
from depbump.models.dependency import Dependency
from depbump.models.dependency_file import DependencyFile
from depbump.models.job import Job
from depbump.utils.logger import get_logger

logger = get_logger("core.change_builder")

__all__ = ["DependencyChangeBuilder", "build_dependency_change"]


class DependencyChangeBuilder:
    """Build one :class:`DependencyChange` for a job.

    Args:
        job: Job context; selects the ecosystem and carries credentials
            and options for its file updater.
        dependency_files: Snapshot of the files before the update.
        updated_dependencies: Dependencies after the update, passed
            through to the change as given.
        change_source: Lead dependency or dependency group.
        registry: Ecosystem registry; defaults to the built-in one.
    """

    def __init__(
        self,
        *,
        job: Job,
        dependency_files: Sequence[DependencyFile],
        updated_dependencies: Sequence[Dependency],
        change_source: ChangeSource,
        registry: Optional[EcosystemRegistry] = None,
    ) -> None:
        self.job = job
        self.dependency_files = list(dependency_files)
        self.updated_dependencies = list(updated_dependencies)
        self.change_source = change_source
        self.registry = registry or default_registry

    @classmethod
    def create_from(
        cls,
        *,
        job: Job,
        dependency_files: Sequence[DependencyFile],
        updated_dependencies: Sequence[Dependency],
        change_source: ChangeSource,
        registry: Optional[EcosystemRegistry] = None,
    ) -> DependencyChange:
        """Build and return the change in one call."""
        return cls(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=updated_dependencies,
            change_source=change_source,
            registry=registry,
        ).run()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> DependencyChange:
        """Run the file updater and package its changed files.

        Raises:
            NoChangesError: No candidate file differs from its original.
            UnsupportedPackageManagerError: The job's package manager is
                not registered.
        """
        candidates = self._generate_candidate_files()
        updated_files = self._changed_files(candidates)

        if not updated_files:
            logger.warning(
                "Update of %s produced no file changes", self._describe_source()
            )
            raise NoChangesError(
                package_manager=self.job.package_manager,
                dependency_names=[dep.name for dep in self.updated_dependencies],
            )

        change = DependencyChange(
            updated_dependencies=tuple(self.updated_dependencies),
            updated_dependency_files=tuple(updated_files),
            grouped=self.grouped,
        )
        logger.info(
            "Built change for %s: %d file(s) updated (%s)",
            self._describe_source(),
            len(updated_files),
            ", ".join(change.updated_file_names),
        )
        return change

    @property
    def grouped(self) -> bool:
        """True when the change source is a dependency group."""
        return isinstance(self.change_source, DependencyGroup)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _generate_candidate_files(self) -> List[DependencyFile]:
        ecosystem = self.registry.lookup(self.job.package_manager)
        logger.debug(
            "Using %s for %s", ecosystem.file_updater.__name__, ecosystem.package_manager
        )
        file_updater = ecosystem.file_updater(
            dependencies=self.updated_dependencies,
            dependency_files=self.dependency_files,
            credentials=self.job.credentials,
            options=self.job.options,
            repo_contents_path=self.job.repo_contents_path,
        )
        return list(file_updater.updated_dependency_files())

    def _changed_files(self, candidates: Sequence[DependencyFile]) -> List[DependencyFile]:
        originals: Dict[Tuple[str, str], DependencyFile] = {
            f.key: f for f in self.dependency_files
        }

        changed: List[DependencyFile] = []
        for candidate in candidates:
            original = originals.get(candidate.key)
            if original is not None and original.content == candidate.content:
                logger.debug("Dropping unchanged file %s", candidate.path)
                continue
            changed.append(candidate)
        return changed

    def _describe_source(self) -> str:
        if isinstance(self.change_source, DependencyGroup):
            return f"group {self.change_source.name!r}"
        return repr(self.change_source.name)


def build_dependency_change(
    job: Job,
    dependency_files: Sequence[DependencyFile],
    updated_dependencies: Sequence[Dependency],
    change_source: ChangeSource,
    *,
    registry: Optional[EcosystemRegistry] = None,
) -> DependencyChange:
    """Functional form of :meth:`DependencyChangeBuilder.create_from`."""
    return DependencyChangeBuilder.create_from(
        job=job,
        dependency_files=dependency_files,
        updated_dependencies=updated_dependencies,
        change_source=change_source,
        registry=registry,
    )
