"""Configuration data models"""

import tempfile
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from ..api.exceptions import ConfigError
from ..constants import (
    HostingType,
    DEFAULT_BAZEL_CMD,
    DEFAULT_TARGETS,
    DEFAULT_PRIMARY_BRANCH,
    DEFAULT_GITOPS_PATH,
    DEFAULT_PUSH_PARALLELISM,
    DEFAULT_DEPENDENCY_KINDS,
    DEFAULT_GITHUB_APP_PRIVATE_KEY,
    ENV_CI_PIPELINE_SLUG,
    ENV_CI_BUILD_URL,
    ENV_CI_REPO,
    ENV_CI_COMMIT,
)


@dataclass
class HostingConfig:
    """Configuration for the merge request hosting backend"""

    type: str = HostingType.BITBUCKET.value

    # REST backends
    api_url: Optional[str] = None
    token: Optional[str] = None

    # GitHub / GitHub App repository
    repo_owner: Optional[str] = None
    repo: Optional[str] = None

    # GitLab project id or path, Bitbucket project key
    project: Optional[str] = None

    # GitHub App credentials
    app_id: Optional[int] = None
    installation_id: Optional[int] = None
    private_key: str = DEFAULT_GITHUB_APP_PRIVATE_KEY
    enterprise_host: Optional[str] = None

    # Additional options
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def hosting_type(self) -> HostingType:
        """Get HostingType enum"""
        try:
            return HostingType(self.type)
        except ValueError:
            raise ConfigError(f"Unsupported git host: {self.type}")

    def required_fields(self) -> List[str]:
        """Names of the identifiers the selected backend cannot run without"""
        hosting_type = self.hosting_type
        if hosting_type == HostingType.GITHUB:
            return ["token", "repo_owner", "repo"]
        elif hosting_type == HostingType.GITLAB:
            return ["token", "project"]
        elif hosting_type == HostingType.BITBUCKET:
            return ["token", "api_url", "project", "repo"]
        elif hosting_type == HostingType.GITHUB_APP:
            return ["repo_owner", "repo", "app_id", "installation_id", "private_key"]
        return []

    def validate(self, require_credentials: bool = True) -> None:
        """Raise ConfigError on an unknown backend or a missing identifier"""
        required = self.required_fields()
        if not require_credentials:
            return
        missing = [name for name in required if not getattr(self, name)]
        if missing:
            raise ConfigError(
                f"{self.type} hosting requires: {', '.join(missing)}"
            )

    def get_display_info(self) -> str:
        """Get display information for the backend"""
        if self.repo_owner and self.repo:
            return f"{self.type}: {self.repo_owner}/{self.repo}"
        if self.project:
            return f"{self.type}: {self.project}"
        return self.type

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HostingConfig':
        """Create from dictionary"""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown hosting options: {', '.join(sorted(unknown))}")
        return cls(**data)


@dataclass
class CIContext:
    """Build metadata from the CI environment, used to compose PR text"""

    pipeline_slug: str = ""
    build_url: str = ""
    repo: str = ""
    commit: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> 'CIContext':
        return cls(
            pipeline_slug=environ.get(ENV_CI_PIPELINE_SLUG, ""),
            build_url=environ.get(ENV_CI_BUILD_URL, ""),
            repo=environ.get(ENV_CI_REPO, ""),
            commit=environ.get(ENV_CI_COMMIT, ""),
        )

    @property
    def is_available(self) -> bool:
        return bool(self.pipeline_slug and self.commit)

    @property
    def commit_url(self) -> str:
        """Browser URL of the commit, derived from an ssh or https remote"""
        repo = self.repo
        if repo.startswith("git@"):
            repo = "https://" + repo[len("git@"):].replace(":", "/", 1)
        if repo.endswith(".git"):
            repo = repo[:-len(".git")]
        return f"{repo}/commit/{self.commit}"

    def pr_title(self) -> str:
        return f"Gitops Deploy: {self.pipeline_slug} - {self.commit[:7]}"

    def pr_body(self) -> str:
        return (
            f"Automated PR for [{self.pipeline_slug}]({self.commit_url}) "
            f"via [Buildkite Pipeline]({self.build_url})"
        )


@dataclass
class GitopsConfig:
    """Run configuration, built once and passed to every component"""

    # Git
    git_repo: str = ""
    git_mirror: Optional[str] = None
    branch_name: str = "unknown"
    git_commit: str = "unknown"
    release_branch: str = DEFAULT_PRIMARY_BRANCH
    pr_target_branch: str = DEFAULT_PRIMARY_BRANCH

    # Build tool
    bazel_cmd: str = DEFAULT_BAZEL_CMD
    workspace: Optional[str] = None
    targets: str = DEFAULT_TARGETS

    # GitOps
    gitops_path: str = DEFAULT_GITOPS_PATH
    gitops_tmpdir: str = field(default_factory=tempfile.gettempdir)
    push_parallelism: int = DEFAULT_PUSH_PARALLELISM
    dry_run: bool = False

    # Pull request
    pr_title: Optional[str] = None
    pr_body: Optional[str] = None
    deployment_branch_suffix: str = ""

    # Pre-resolved inputs ("train:binary" bindings and push commands)
    resolved_binaries: List[str] = field(default_factory=list)
    resolved_pushes: List[str] = field(default_factory=list)

    # Push dependency filters
    dependency_kinds: List[str] = field(default_factory=lambda: list(DEFAULT_DEPENDENCY_KINDS))
    dependency_names: List[str] = field(default_factory=list)
    dependency_attrs: List[str] = field(default_factory=list)

    hosting: HostingConfig = field(default_factory=HostingConfig)
    ci: CIContext = field(default_factory=CIContext)

    @property
    def git_host(self) -> HostingType:
        return self.hosting.hosting_type

    def validate(self) -> None:
        """Validate settings before any mutation happens"""
        if self.push_parallelism < 1:
            raise ConfigError(f"push_parallelism must be at least 1, got {self.push_parallelism}")
        if not self.gitops_path:
            raise ConfigError("gitops_path must not be empty")
        if not self.git_repo:
            raise ConfigError("git_repo must be set")
        self.hosting.validate(require_credentials=not self.dry_run)

    def pull_request_text(self, branch: str) -> Dict[str, str]:
        """Title and body for the merge request of ``branch``"""
        if self.ci.is_available:
            title, body = self.ci.pr_title(), self.ci.pr_body()
        else:
            title, body = f"GitOps deployment {branch}", branch
        return {
            "title": self.pr_title or title,
            "body": self.pr_body or body,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitopsConfig':
        """Create from dictionary (e.g. a parsed YAML config file)"""
        data = dict(data)
        hosting = HostingConfig.from_dict(data.pop("hosting", None) or {})
        ci = CIContext(**(data.pop("ci", None) or {}))

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration options: {', '.join(sorted(unknown))}")

        return cls(hosting=hosting, ci=ci, **data)
