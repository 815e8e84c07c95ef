"""Release train data models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..constants import DEPLOY_BRANCH_PREFIX

# Build graph label, e.g. //services/api:gitops
Target = str

# Placeholder reference -> resolved registry reference
ImageMap = Dict[str, str]


@dataclass(frozen=True)
class TargetDescriptor:
    """One build graph query result"""

    name: Target
    kind: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    def attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


@dataclass
class ReleaseTrain:
    """Named group of targets promoted together on one deployment branch"""

    name: str
    targets: List[Target] = field(default_factory=list)

    def add(self, target: Target) -> None:
        """Append target, keeping first-seen order without duplicates"""
        if target not in self.targets:
            self.targets.append(target)

    def branch_name(self, suffix: str = "") -> str:
        return f"{DEPLOY_BRANCH_PREFIX}{self.name}{suffix}"

    def __contains__(self, target: Target) -> bool:
        return target in self.targets

    def __len__(self) -> int:
        return len(self.targets)
