"""Service layer for gitops-tool"""

from .config_service import ConfigService, merge_overrides
from .gitops_service import GitopsService

__all__ = [
    "ConfigService",
    "merge_overrides",
    "GitopsService",
]
