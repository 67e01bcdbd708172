"""File updaters: the ecosystem-specific "apply update" step.

The change builder treats a file updater as a black box: it is created
with the dependency files, the already-updated dependencies and the job's
credentials and options, and asked for ``updated_dependency_files()``.
Ecosystems with native tooling register their own :class:`FileUpdater`
subclass in :mod:`depbump.core.registry`; the built-in
:class:`RequirementFileUpdater` covers manifests whose requirement
strings can be edited in place.
"""

from __future__ import annotations

import posixpath
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from depbump.models.dependency import Dependency, Requirement
from depbump.models.dependency_file import DependencyFile
from depbump.utils.logger import get_logger

logger = get_logger("core.file_updater")

__all__ = ["FileUpdater", "RequirementFileUpdater"]


class FileUpdater:
    """Base class for ecosystem file updaters.

    Subclasses implement :meth:`updated_dependency_files`. They may return
    unchanged files; the change builder filters those out.

    Args:
        dependencies: Dependencies after the update, with
            ``previous_requirements`` set.
        dependency_files: Snapshot of the files before the update.
        credentials: Job credentials, passed through untouched.
        options: Job feature flags, passed through untouched.
        repo_contents_path: Checkout location, for updaters that run
            native tools.
    """

    def __init__(
        self,
        *,
        dependencies: Sequence[Dependency],
        dependency_files: Sequence[DependencyFile],
        credentials: Sequence[Mapping[str, Any]] = (),
        options: Optional[Mapping[str, Any]] = None,
        repo_contents_path: Optional[str] = None,
    ) -> None:
        self.dependencies = list(dependencies)
        self.dependency_files = list(dependency_files)
        self.credentials = list(credentials)
        self.options = dict(options or {})
        self.repo_contents_path = repo_contents_path

    def updated_dependency_files(self) -> List[DependencyFile]:
        """Return the candidate updated files."""
        raise NotImplementedError

    def get_original_file(self, name: str) -> Optional[DependencyFile]:
        """Return the original (non-support) file called ``name``."""
        for dependency_file in self.dependency_files:
            if dependency_file.name == name and not dependency_file.support_file:
                return dependency_file
        return None


class RequirementFileUpdater(FileUpdater):
    """Apply requirement string changes to the files that declare them.

    For every dependency, each ``(previous, updated)`` requirement pair
    whose strings differ is applied to the file it names: on every line
    that mentions the dependency, the first occurrence of the previous
    string is replaced by the new one. Nothing outside that span changes,
    so quoting, spacing and line endings survive.

    Every original file is returned, changed or not.
    """

    def updated_dependency_files(self) -> List[DependencyFile]:
        originals = [f for f in self.dependency_files if not f.support_file]
        contents: Dict[Tuple[str, str], str] = {f.key: f.content for f in originals}

        for dependency in self.dependencies:
            for previous, updated in dependency.requirement_changes():
                targets = self._files_for(originals, updated.file)
                if not targets:
                    logger.debug(
                        "No file %s for %s; skipping requirement", updated.file, dependency.name
                    )
                    continue
                for target in targets:
                    contents[target.key] = self._replace_requirement(
                        contents[target.key], dependency.name, previous, updated
                    )

        return [f.with_content(contents[f.key]) for f in originals]

    @staticmethod
    def _files_for(
        files: Sequence[DependencyFile], file_name: str
    ) -> List[DependencyFile]:
        """Resolve a requirement's file to the snapshot files it can mean.

        A repository path (``packages/app/package.json``) selects that file
        only. A bare name selects every file called that, in any directory.
        """
        if "/" in file_name.strip("/"):
            path = posixpath.join("/", file_name)
            return [f for f in files if f.path == path]
        return [f for f in files if f.name == file_name]

    @staticmethod
    def _replace_requirement(
        content: str,
        dependency_name: str,
        previous: Requirement,
        updated: Requirement,
    ) -> str:
        old = previous.requirement
        new = updated.requirement
        if not old or new is None:
            return content

        name_re = re.compile(
            rf"(?<![\w.\-@/]){re.escape(dependency_name)}(?![\w.\-/])", re.IGNORECASE
        )
        lines = content.splitlines(keepends=True)
        for index, line in enumerate(lines):
            if old in line and name_re.search(line):
                lines[index] = line.replace(old, new, 1)
        return "".join(lines)
