"""Hosting request models"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class FileEntry:
    """File staged for an API commit

    relative_path is rooted at the repository, full_path points at the
    local checkout. A deleted file has no full_path.
    """

    relative_path: str
    full_path: Optional[Path] = None

    @property
    def is_deleted(self) -> bool:
        return self.full_path is None


@dataclass(frozen=True)
class PullRequest:
    """Merge request to open for one changed branch"""

    from_branch: str
    to_branch: str
    title: str
    body: str


@dataclass
class PullRequestResult:
    """Outcome of a create-or-reuse merge request call"""

    request: PullRequest
    created: bool
    url: Optional[str] = None

    @property
    def reused(self) -> bool:
        return not self.created
