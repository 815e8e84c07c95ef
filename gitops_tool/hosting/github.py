# gitops_tool/hosting/github.py
"""GitHub pull request backend (personal or bot token)"""

from typing import Any, Dict

from ..constants import DEFAULT_GITHUB_API_URL
from ..models.hosting import PullRequest
from .rest import RestHostingBackend


class GitHubBackend(RestHostingBackend):
    """GitHub REST API v3 implementation"""

    # GitHub answers 422 Unprocessable Entity when the PR already exists
    conflict_status = 422

    @property
    def base_url(self) -> str:
        if self.config.api_url:
            return self.config.api_url
        if self.config.enterprise_host:
            return f"https://{self.config.enterprise_host}/api/v3/"
        return DEFAULT_GITHUB_API_URL

    def endpoint(self) -> str:
        return f"/repos/{self.config.repo_owner}/{self.config.repo}/pulls"

    def payload(self, request: PullRequest) -> Dict[str, Any]:
        return {
            "title": request.title,
            "head": request.from_branch,
            "base": request.to_branch,
            "body": request.body,
            "maintainer_can_modify": False,
            "draft": False,
        }

    def auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github+json",
        }
