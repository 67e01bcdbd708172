"""Ecosystem registry: package manager tag to capabilities.

Each supported package manager maps to an :class:`Ecosystem`, which
bundles the file updater class used by the change builder and the error
rule set used by the error classifier. Lookup happens once per job; no
code outside this module branches on package manager names.

Typical usage::

    from depbump.core.registry import default_registry

    ecosystem = default_registry.lookup("npm_and_yarn")
    updater = ecosystem.file_updater(dependencies=..., dependency_files=...)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Type, Union

from depbump.core.file_updater import FileUpdater, RequirementFileUpdater
from depbump.core.yarn_rules import YARN_RULES
from depbump.exceptions import UnsupportedPackageManagerError
from depbump.models.error import ErrorRuleSet
from depbump.utils.logger import get_logger

logger = get_logger("core.registry")

__all__ = ["Ecosystem", "EcosystemRegistry", "PackageManager", "default_registry"]


class PackageManager(str, Enum):
    """Package manager tags known out of the box."""

    NPM_AND_YARN = "npm_and_yarn"
    NUGET = "nuget"
    BUNDLER = "bundler"
    PIP = "pip"


@dataclass(frozen=True)
class Ecosystem:
    """Capabilities of one package manager.

    Attributes:
        package_manager: Registry tag.
        file_updater: Class producing updated files for a job.
        error_rules: Rule set for classifying native tool failures, if the
            ecosystem has one.
    """

    package_manager: str
    file_updater: Type[FileUpdater]
    error_rules: Optional[ErrorRuleSet] = None


class EcosystemRegistry:
    """Thread-safe mapping of package manager tags to ecosystems."""

    def __init__(self) -> None:
        self._ecosystems: Dict[str, Ecosystem] = {}
        self._lock = threading.Lock()

    def register(
        self,
        package_manager: Union[str, PackageManager],
        *,
        file_updater: Type[FileUpdater] = RequirementFileUpdater,
        error_rules: Optional[ErrorRuleSet] = None,
    ) -> Ecosystem:
        """Register (or replace) the ecosystem for ``package_manager``."""
        tag = _tag(package_manager)
        ecosystem = Ecosystem(
            package_manager=tag, file_updater=file_updater, error_rules=error_rules
        )
        with self._lock:
            if tag in self._ecosystems:
                logger.debug("Replacing ecosystem registration for %s", tag)
            self._ecosystems[tag] = ecosystem
        return ecosystem

    def lookup(self, package_manager: Union[str, PackageManager]) -> Ecosystem:
        """Return the ecosystem for ``package_manager``.

        Raises:
            UnsupportedPackageManagerError: Nothing is registered for it.
        """
        tag = _tag(package_manager)
        with self._lock:
            ecosystem = self._ecosystems.get(tag)
        if ecosystem is None:
            raise UnsupportedPackageManagerError(tag)
        return ecosystem

    def __contains__(self, package_manager: object) -> bool:
        if not isinstance(package_manager, (str, PackageManager)):
            return False
        with self._lock:
            return _tag(package_manager) in self._ecosystems

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._ecosystems))


def _tag(package_manager: Union[str, PackageManager]) -> str:
    if isinstance(package_manager, PackageManager):
        return package_manager.value
    return package_manager.strip().lower()


def _build_default_registry() -> EcosystemRegistry:
    registry = EcosystemRegistry()
    registry.register(PackageManager.NPM_AND_YARN, error_rules=YARN_RULES)
    registry.register(PackageManager.NUGET)
    registry.register(PackageManager.BUNDLER)
    registry.register(PackageManager.PIP)
    return registry


#: Registry used when callers do not supply their own.
default_registry = _build_default_registry()
