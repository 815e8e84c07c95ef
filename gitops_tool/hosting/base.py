# gitops_tool/hosting/base.py
"""Hosting backend abstract base class"""

from abc import ABC, abstractmethod

from ..models.config import HostingConfig
from ..models.hosting import PullRequest, PullRequestResult


class HostingBackend(ABC):
    """Abstract base class for all merge request hosting backends"""

    def __init__(self, config: HostingConfig):
        """
        Initialize hosting backend

        Args:
            config: Backend configuration
        """
        self.config = config
        self._initialized = False

    @property
    def name(self) -> str:
        return self.config.type

    async def initialize(self) -> None:
        """Initialize hosting backend (e.g., open HTTP sessions, mint tokens)"""
        if not self._initialized:
            await self._do_initialize()
            self._initialized = True

    @abstractmethod
    async def _do_initialize(self) -> None:
        """Actual initialization logic to be implemented by subclasses"""
        pass

    @abstractmethod
    async def create_pr(self,
                        from_branch: str,
                        to_branch: str,
                        title: str,
                        body: str) -> PullRequestResult:
        """
        Create a merge request, or reuse the one already open

        A provider conflict saying the request already exists is not an
        error: the result comes back with ``created=False``.

        Args:
            from_branch: Source branch
            to_branch: Target branch
            title: Request title
            body: Request description

        Returns:
            Result describing the created or reused request

        Raises:
            HostingError: On any other provider error
        """
        pass

    async def open(self, request: PullRequest) -> PullRequestResult:
        """Create or reuse the merge request described by ``request``"""
        return await self.create_pr(
            request.from_branch,
            request.to_branch,
            request.title,
            request.body
        )

    async def close(self) -> None:
        """Close backend connections"""
        if self._initialized:
            await self._do_close()
            self._initialized = False

    async def _do_close(self) -> None:
        """Actual cleanup logic to be implemented by subclasses"""
        pass

    async def __aenter__(self):
        """Async context manager entry"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
