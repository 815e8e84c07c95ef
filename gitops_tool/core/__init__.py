"""Core functionality for gitops-tool"""

from .image_resolver import ImageResolver, resolve_images
from .git_workdir import GitWorkdir
from .bazel import QueryEngine, BazelQueryEngine, target_to_executable
from .release_train import ReleaseTrainPlanner, needs_recreation
from .train_processor import TrainProcessor
from .push_coordinator import PushCoordinator

__all__ = [
    "ImageResolver",
    "resolve_images",
    "GitWorkdir",
    "QueryEngine",
    "BazelQueryEngine",
    "target_to_executable",
    "ReleaseTrainPlanner",
    "needs_recreation",
    "TrainProcessor",
    "PushCoordinator",
]
