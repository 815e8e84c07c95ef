# gitops_tool/hosting/rest.py
"""Shared implementation of token authenticated REST backends"""

import logging
from abc import abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..api.exceptions import HostingError
from ..constants import DEFAULT_HTTP_TIMEOUT
from ..models.config import HostingConfig
from ..models.hosting import PullRequest, PullRequestResult
from .base import HostingBackend

logger = logging.getLogger(__name__)


class RestHostingBackend(HostingBackend):
    """Merge request creation through one POST endpoint

    Subclasses describe the endpoint, the payload and which status code
    the provider uses to say the request already exists.
    """

    # Status code meaning "a request for this branch pair is already open"
    conflict_status: int = 409

    def __init__(self,
                 config: HostingConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize REST backend

        Args:
            config: Backend configuration
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(config)
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    @property
    @abstractmethod
    def base_url(self) -> str:
        """API root URL"""
        pass

    @abstractmethod
    def endpoint(self) -> str:
        """Path of the create merge request endpoint, relative to base_url"""
        pass

    @abstractmethod
    def payload(self, request: PullRequest) -> Dict[str, Any]:
        """JSON body of the create call"""
        pass

    @abstractmethod
    def auth_headers(self) -> Dict[str, str]:
        """Authentication headers"""
        pass

    def created_url(self, data: Dict[str, Any]) -> Optional[str]:
        """Browser URL of a created request, from the response body"""
        return data.get("html_url") or data.get("web_url")

    async def _do_initialize(self) -> None:
        headers = {"Accept": "application/json"}
        headers.update(self.auth_headers())
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.config.options.get("timeout", DEFAULT_HTTP_TIMEOUT)),
            transport=self.transport,
        )

    async def create_pr(self,
                        from_branch: str,
                        to_branch: str,
                        title: str,
                        body: str) -> PullRequestResult:
        await self.initialize()
        request = PullRequest(from_branch, to_branch, title, body)

        try:
            response = await self.client.post(self.endpoint(), json=self.payload(request))
        except httpx.HTTPError as e:
            raise HostingError(f"{self.name} request failed: {e}") from e

        if response.is_success:
            url = self.created_url(_json_or_empty(response))
            logger.info(f"Created PR: {url or from_branch}")
            return PullRequestResult(request, created=True, url=url)

        if response.status_code == self.conflict_status:
            logger.info(f"Reusing existing PR for {from_branch} -> {to_branch}")
            return PullRequestResult(request, created=False)

        logger.error(f"{self.name} response: {response.text}")
        raise HostingError(
            f"Failed to create PR {from_branch} -> {to_branch}: HTTP {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )

    async def _do_close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
