# gitops_tool/api/__init__.py
"""API layer for gitops-tool"""

from .exceptions import (
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
