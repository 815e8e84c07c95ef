"""Release train planning"""

import logging
from typing import Dict, Iterable, List

from ..api.exceptions import ConfigError
from ..constants import DEPLOYMENT_BRANCH_ATTR
from ..models.release_train import ReleaseTrain, Target
from .bazel import QueryEngine, release_trains_query

logger = logging.getLogger(__name__)


class ReleaseTrainPlanner:
    """Group gitops targets into release trains"""

    @staticmethod
    def from_resolved_binaries(bindings: Iterable[str]) -> List[ReleaseTrain]:
        """
        Build trains from ``train:binary`` bindings

        Used when the tool itself runs as a build target and cannot query
        the build graph again.

        Raises:
            ConfigError: If a binding has no ``:`` separator
        """
        trains: Dict[str, ReleaseTrain] = {}
        for binding in bindings:
            name, separator, binary = binding.partition(":")
            if not separator:
                raise ConfigError(f"Invalid resolved_binary format: {binding}")
            trains.setdefault(name, ReleaseTrain(name)).add(binary)
        return _ordered(trains)

    @staticmethod
    def from_query(engine: QueryEngine, release_branch: str, targets: str) -> List[ReleaseTrain]:
        """
        Build trains from gitops targets of ``release_branch``

        Args:
            engine: Build graph query engine
            release_branch: Value of the release_branch_prefix attribute
            targets: Target pattern to scan

        Returns:
            Trains keyed by their deployment_branch attribute
        """
        trains: Dict[str, ReleaseTrain] = {}
        for descriptor in engine.query(release_trains_query(release_branch, targets)):
            name = descriptor.attribute(DEPLOYMENT_BRANCH_ATTR)
            if not name:
                continue
            trains.setdefault(name, ReleaseTrain(name)).add(descriptor.name)
        return _ordered(trains)


def needs_recreation(previous: Iterable[Target], current: Iterable[Target]) -> bool:
    """True iff a previously deployed target is no longer in the train"""
    current_targets = set(current)
    return any(target not in current_targets for target in previous)


def _ordered(trains: Dict[str, ReleaseTrain]) -> List[ReleaseTrain]:
    ordered = [trains[name] for name in sorted(trains)]
    for train in ordered:
        logger.debug(f"Release train {train.name}: {', '.join(train.targets)}")
    return ordered
