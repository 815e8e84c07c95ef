# gitops_tool/hosting/gitlab.py
"""GitLab merge request backend"""

from typing import Any, Dict
from urllib.parse import quote

from ..constants import DEFAULT_GITLAB_API_URL
from ..models.hosting import PullRequest
from .rest import RestHostingBackend


class GitLabBackend(RestHostingBackend):
    """GitLab REST API v4 implementation"""

    # 409 Conflict: another open merge request already exists for this source branch
    conflict_status = 409

    @property
    def base_url(self) -> str:
        return self.config.api_url or DEFAULT_GITLAB_API_URL

    def endpoint(self) -> str:
        # Project may be a numeric id or a namespaced path
        project = quote(str(self.config.project), safe="")
        return f"/projects/{project}/merge_requests"

    def payload(self, request: PullRequest) -> Dict[str, Any]:
        return {
            "title": request.title,
            "description": request.body,
            "source_branch": request.from_branch,
            "target_branch": request.to_branch,
        }

    def auth_headers(self) -> Dict[str, str]:
        return {"PRIVATE-TOKEN": str(self.config.token)}
