"""
depbump: update application and failure classification for dependency updaters.

depbump is the core an automated dependency updater runs once it knows
which dependency to move and where to move it:

    • Rewrites version constraints (exact pins, wildcards) for a target version
    • Assembles changed manifest and lock files into one auditable change set
    • Classifies raw, ANSI-coloured package-manager output into typed errors

Fetching repositories, running package managers and opening pull requests
are left to the caller.
"""

from __future__ import annotations

from depbump.__version__ import __version__
from depbump.core import (
    DependencyChangeBuilder,
    ErrorClassifier,
    rewrite_requirements,
    update_dependency,
)
from depbump.models import (
    ClassifiedError,
    Dependency,
    DependencyChange,
    DependencyFile,
    DependencyGroup,
    ErrorKind,
    Requirement,
)

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depbump Contributors"
__license__ = "Apache-2.0"
__description__ = "Requirement rewriting, change assembly and error classification for dependency updates."

__all__ = [
    "__version__",
    "ClassifiedError",
    "Dependency",
    "DependencyChange",
    "DependencyChangeBuilder",
    "DependencyFile",
    "DependencyGroup",
    "ErrorClassifier",
    "ErrorKind",
    "Requirement",
    "rewrite_requirements",
    "update_dependency",
]
