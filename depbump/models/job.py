"""
Update job context for depbump.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Job:
    """Job-level settings forwarded to the ecosystem file updater.

    depbump never inspects credentials or options; they are handed to the
    registered file updater unchanged.

    Attributes:
        package_manager: Package manager identifier of the job.
        credentials: Registry and git credentials, one mapping each.
        options: Feature flags and experiments.
        repo_contents_path: Checkout location for updaters that shell out
            to native tooling.
    """

    package_manager: str
    credentials: Tuple[Mapping[str, Any], ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)
    repo_contents_path: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "credentials", tuple(self.credentials))

    def option(self, name: str, default: Any = None) -> Any:
        """Return a single option value."""
        return self.options.get(name, default)

    def __repr__(self) -> str:
        # Credentials stay out of reprs and logs
        return (
            "Job("
            f"package_manager={self.package_manager!r}, "
            f"credentials=<{len(self.credentials)}>, "
            f"options={dict(self.options)!r}"
            ")"
        )
