# gitops_tool/models/__init__.py
"""Data models for gitops-tool"""

from .manifest import ManifestNode, ManifestDocument, NodeKind
from .release_train import Target, ImageMap, TargetDescriptor, ReleaseTrain
from .hosting import FileEntry, PullRequest, PullRequestResult
from .result import OperationStatus, BranchState, TrainResult, RunResult
from .config import GitopsConfig, HostingConfig, CIContext

__all__ = [
    # Manifest models
    "ManifestNode",
    "ManifestDocument",
    "NodeKind",

    # Release train models
    "Target",
    "ImageMap",
    "TargetDescriptor",
    "ReleaseTrain",

    # Hosting models
    "FileEntry",
    "PullRequest",
    "PullRequestResult",

    # Result models
    "OperationStatus",
    "BranchState",
    "TrainResult",
    "RunResult",

    # Config models
    "GitopsConfig",
    "HostingConfig",
    "CIContext",
]
