"""
Dependency file data model for depbump.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class DependencyFile:
    """A manifest or lock file snapshot.

    Content never changes after construction; an updated file is a new
    value created with :meth:`with_content`.

    Attributes:
        name: File name, possibly with a relative path (``sub/package.json``).
        content: Full text content.
        directory: Directory the file lives in, ``/`` being the repo root.
        support_file: True for auxiliary files that inform the update but
            are not themselves updated (``.yarnrc.yml``, ``.npmrc``...).
    """

    name: str
    content: str
    directory: str = "/"
    support_file: bool = False

    def __post_init__(self) -> None:
        directory = "/" + self.directory.strip("/") if self.directory else "/"
        object.__setattr__(self, "directory", directory)

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the file."""
        return (self.directory, self.name)

    @property
    def path(self) -> str:
        """Repository-relative path of the file."""
        return posixpath.join(self.directory, self.name)

    def with_content(self, content: str) -> "DependencyFile":
        """Return a copy of this file holding ``content``."""
        return replace(self, content=content)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "directory": self.directory,
            "content": self.content,
            "support_file": self.support_file,
        }

    def __repr__(self) -> str:
        return (
            "DependencyFile("
            f"name={self.name!r}, "
            f"directory={self.directory!r}, "
            f"size={len(self.content)}"
            ")"
        )
