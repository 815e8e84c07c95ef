# gitops_tool/hosting/factory.py
"""Hosting backend factory"""

from typing import Dict, List, Type

from ..constants import HostingType
from ..models.config import HostingConfig
from .base import HostingBackend
from .bitbucket import BitbucketBackend
from .github import GitHubBackend
from .github_app import GitHubAppBackend
from .gitlab import GitLabBackend


class HostingFactory:
    """Factory for creating hosting backend instances"""

    # Registry of hosting backends
    _backends: Dict[HostingType, Type[HostingBackend]] = {
        HostingType.GITHUB: GitHubBackend,
        HostingType.GITLAB: GitLabBackend,
        HostingType.BITBUCKET: BitbucketBackend,
        HostingType.GITHUB_APP: GitHubAppBackend,
    }

    @classmethod
    def create(cls, config: HostingConfig, require_credentials: bool = True) -> HostingBackend:
        """Create hosting backend from configuration

        Args:
            config: Hosting configuration
            require_credentials: Whether missing identifiers are an error

        Returns:
            Hosting backend instance

        Raises:
            ConfigError: If the type is unknown or identifiers are missing
        """
        hosting_type = config.hosting_type
        config.validate(require_credentials=require_credentials)

        backend_class = cls._backends[hosting_type]
        return backend_class(config)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        """Hosting type names accepted by ``--git-host``"""
        return [hosting_type.value for hosting_type in cls._backends.keys()]
