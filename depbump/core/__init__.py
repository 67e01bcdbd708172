"""
Core components of depbump.

- :mod:`~depbump.core.requirement_updater`: rewrite requirement strings
- :mod:`~depbump.core.change_builder`: assemble a ``DependencyChange``
- :mod:`~depbump.core.error_classifier`: classify native tool failures
- :mod:`~depbump.core.registry`: package manager to ecosystem mapping
"""

from __future__ import annotations

from depbump.core.file_updater import FileUpdater, RequirementFileUpdater
from depbump.core.registry import (
    Ecosystem,
    EcosystemRegistry,
    PackageManager,
    default_registry,
)
from depbump.core.requirement_updater import (
    RequirementsUpdater,
    rewrite_requirements,
    update_dependency,
)
from depbump.core.change_builder import DependencyChangeBuilder, build_dependency_change
from depbump.core.error_classifier import (
    ErrorClassifier,
    find_usage_error,
    pattern_in_message,
)

__all__ = [
    "DependencyChangeBuilder",
    "Ecosystem",
    "EcosystemRegistry",
    "ErrorClassifier",
    "FileUpdater",
    "PackageManager",
    "RequirementFileUpdater",
    "RequirementsUpdater",
    "build_dependency_change",
    "default_registry",
    "find_usage_error",
    "pattern_in_message",
    "rewrite_requirements",
    "update_dependency",
]
