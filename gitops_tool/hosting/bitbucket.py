# gitops_tool/hosting/bitbucket.py
"""Bitbucket Server pull request backend"""

from typing import Any, Dict, Optional

from ..models.hosting import PullRequest
from .rest import RestHostingBackend


class BitbucketBackend(RestHostingBackend):
    """Bitbucket Server (Data Center) REST API 1.0 implementation"""

    # DuplicatePullRequestException
    conflict_status = 409

    @property
    def base_url(self) -> str:
        return self.config.api_url

    def endpoint(self) -> str:
        return (
            f"/rest/api/1.0/projects/{self.config.project}"
            f"/repos/{self.config.repo}/pull-requests"
        )

    def _ref(self, branch: str) -> Dict[str, Any]:
        return {
            "id": f"refs/heads/{branch}",
            "repository": {
                "slug": self.config.repo,
                "project": {"key": self.config.project},
            },
        }

    def payload(self, request: PullRequest) -> Dict[str, Any]:
        return {
            "title": request.title,
            "description": request.body,
            "state": "OPEN",
            "open": True,
            "closed": False,
            "fromRef": self._ref(request.from_branch),
            "toRef": self._ref(request.to_branch),
            "locked": False,
            "reviewers": [],
        }

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}"}

    def created_url(self, data: Dict[str, Any]) -> Optional[str]:
        for link in data.get("links", {}).get("self", []):
            if link.get("href"):
                return link["href"]
        return None
