# gitops_tool/hosting/__init__.py
"""Merge request hosting backends for gitops-tool"""

from .base import HostingBackend
from .rest import RestHostingBackend
from .github import GitHubBackend
from .gitlab import GitLabBackend
from .bitbucket import BitbucketBackend
from .github_app import GitHubAppBackend, collect_file_entries
from .factory import HostingFactory

__all__ = [
    'HostingBackend',
    'RestHostingBackend',
    'GitHubBackend',
    'GitLabBackend',
    'BitbucketBackend',
    'GitHubAppBackend',
    'collect_file_entries',
    'HostingFactory',
]
