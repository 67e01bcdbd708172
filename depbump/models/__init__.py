"""
Unified data model exports for depbump.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``depbump.models`` instead of individual submodules.

Example:
    >>> from depbump.models import Dependency, Requirement, DependencyChange
"""

from __future__ import annotations

from depbump.models.dependency import (
    Dependency,
    DependencyDetails,
    Requirement,
    RequirementSource,
)
from depbump.models.dependency_file import DependencyFile
from depbump.models.change import ChangeSource, DependencyChange, DependencyGroup
from depbump.models.job import Job
from depbump.models.error import (
    ClassificationOrder,
    ClassifiedError,
    ErrorContext,
    ErrorKind,
    ErrorRule,
    ErrorRuleSet,
)

__all__ = [
    "ChangeSource",
    "ClassificationOrder",
    "ClassifiedError",
    "Dependency",
    "DependencyChange",
    "DependencyDetails",
    "DependencyFile",
    "DependencyGroup",
    "ErrorContext",
    "ErrorKind",
    "ErrorRule",
    "ErrorRuleSet",
    "Job",
    "Requirement",
    "RequirementSource",
]
