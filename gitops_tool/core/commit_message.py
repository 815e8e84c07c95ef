"""Commit message composition and parsing

Deployment commits embed the list of targets that produced them so the
next run can tell whether a target was removed from its release train.
"""

from typing import Iterable, List

from ..constants import COMMIT_TARGETS_BEGIN, COMMIT_TARGETS_END
from ..models.release_train import Target


def generate(targets: Iterable[Target]) -> str:
    """Render the machine readable target block"""
    lines = [COMMIT_TARGETS_BEGIN]
    lines.extend(targets)
    lines.append(COMMIT_TARGETS_END)
    return "\n".join(lines) + "\n"


def extract_targets(message: str) -> List[Target]:
    """Targets listed in the block of ``message``; empty when there is none"""
    targets: List[Target] = []
    inside = False
    for line in message.splitlines():
        line = line.strip()
        if line == COMMIT_TARGETS_BEGIN:
            inside = True
            continue
        if line == COMMIT_TARGETS_END:
            break
        if inside and line:
            targets.append(line)
    return targets if inside else []


def compose(release_branch: str,
            source_branch: str,
            source_commit: str,
            targets: List[Target]) -> str:
    """Full commit message for one release train"""
    return (
        f"GitOps for release branch {release_branch} from {source_branch} commit {source_commit}\n"
        f"\n"
        f"Update {len(targets)} target(s)\n"
        f"{generate(targets)}"
    )
