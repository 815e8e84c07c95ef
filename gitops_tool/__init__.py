"""gitops-tool - Promote build outputs into a GitOps repository.

Regenerates deployment manifests for release trains on a shared checkout,
resolves container image placeholders, pushes images and opens merge
requests on the configured git host.
"""

from .__version__ import __version__, __version_info__, __author__, __license__

# Core API
from .api.gitops import create_prs, resolve
from .core.image_resolver import ImageResolver, resolve_images
from .services.gitops_service import GitopsService

# Data models
from .models.config import GitopsConfig, HostingConfig, CIContext
from .models.release_train import ReleaseTrain
from .models.result import RunResult, TrainResult, OperationStatus

# Exceptions
from .api.exceptions import (
    GitopsToolError,
    ConfigError,
    QueryError,
    ResolveError,
    ManifestDecodeError,
    MissingIdentityError,
    UnresolvedImageError,
    CommandError,
    GitError,
    HostingError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",

    # Core API
    "create_prs",
    "resolve",
    "ImageResolver",
    "resolve_images",
    "GitopsService",

    # Data models
    "GitopsConfig",
    "HostingConfig",
    "CIContext",
    "ReleaseTrain",
    "RunResult",
    "TrainResult",
    "OperationStatus",

    # Exceptions
    "GitopsToolError",
    "ConfigError",
    "QueryError",
    "ResolveError",
    "ManifestDecodeError",
    "MissingIdentityError",
    "UnresolvedImageError",
    "CommandError",
    "GitError",
    "HostingError",
]
