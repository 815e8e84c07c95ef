"""Shared test configuration and fixtures for the gitops-tool test suite."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from gitops_tool.core.bazel import QueryEngine
from gitops_tool.hosting.base import HostingBackend
from gitops_tool.models.config import GitopsConfig, HostingConfig
from gitops_tool.models.hosting import PullRequest, PullRequestResult
from gitops_tool.models.release_train import TargetDescriptor


class FakeQueryEngine(QueryEngine):
    """Returns one canned response per query, in order"""

    def __init__(self, responses: Optional[List[List[TargetDescriptor]]] = None):
        self.responses = list(responses or [])
        self.queries: List[str] = []

    def query(self, expression: str) -> List[TargetDescriptor]:
        self.queries.append(expression)
        if not self.responses:
            return []
        return list(self.responses.pop(0))


class FakeWorkdir:
    """In-memory stand-in for GitWorkdir

    ``changes`` maps a branch to the files a target run leaves modified on it.
    """

    def __init__(self,
                 directory: Path,
                 branches: Optional[List[str]] = None,
                 messages: Optional[Dict[str, str]] = None,
                 changes: Optional[Dict[str, List[str]]] = None):
        self.directory = directory
        self.existing = set(branches or [])
        self.messages = dict(messages or {})
        self.changes = dict(changes or {})
        self.current: Optional[str] = None
        self.recreated: List[str] = []
        self.commits: Dict[str, str] = {}
        self.pushed: List[str] = []

    def switch_to_branch(self, branch: str, base: str) -> bool:
        self.current = branch
        if branch in self.existing:
            return False
        self.existing.add(branch)
        return True

    def recreate_branch(self, branch: str, base: str) -> None:
        self.recreated.append(branch)
        self.messages.pop(branch, None)
        self.current = branch

    def last_commit_message(self) -> str:
        return self.messages.get(self.current, "")

    def modified_files(self, path: Optional[str] = None) -> List[str]:
        return list(self.changes.get(self.current, []))

    def commit(self, message: str, gitops_path: Optional[str] = None) -> bool:
        if not self.changes.get(self.current):
            return False
        self.commits[self.current] = message
        self.messages[self.current] = message
        return True

    def push(self, branches: List[str]) -> None:
        self.pushed.extend(branches)


class FakeHosting(HostingBackend):
    """Records merge requests instead of calling a provider"""

    def __init__(self, config: Optional[HostingConfig] = None):
        super().__init__(config or HostingConfig(
            type="github", token="secret", repo_owner="acme", repo="gitops"
        ))
        self.requests: List[PullRequest] = []
        self.commits: List[dict] = []
        self.closed = False

    async def _do_initialize(self) -> None:
        self.closed = False

    async def create_pr(self, from_branch, to_branch, title, body) -> PullRequestResult:
        request = PullRequest(from_branch, to_branch, title, body)
        self.requests.append(request)
        return PullRequestResult(request, created=True, url=f"https://example.com/{from_branch}")

    async def create_commit(self, base, branch, checkout_root, files, title, body):
        self.commits.append({
            "base": base,
            "branch": branch,
            "checkout_root": checkout_root,
            "files": list(files),
        })
        return await self.create_pr(branch, base, title, body)

    async def _do_close(self) -> None:
        self.closed = True


def descriptor(name: str, **attributes) -> TargetDescriptor:
    return TargetDescriptor(name=name, kind="gitops", attributes=attributes)


@pytest.fixture
def make_descriptor():
    return descriptor


@pytest.fixture
def make_query_engine():
    return FakeQueryEngine


@pytest.fixture
def make_workdir(tmp_path):
    def factory(**kwargs) -> FakeWorkdir:
        return FakeWorkdir(tmp_path / "checkout", **kwargs)
    return factory


@pytest.fixture
def make_hosting():
    return FakeHosting


@pytest.fixture
def github_hosting_config():
    return HostingConfig(type="github", token="secret", repo_owner="acme", repo="gitops")


@pytest.fixture
def gitops_config(tmp_path, github_hosting_config):
    return GitopsConfig(
        git_repo="git@git.example.com:acme/gitops.git",
        branch_name="feature/login",
        git_commit="0123456789abcdef",
        release_branch="release/1",
        pr_target_branch="master",
        gitops_path="cloud",
        gitops_tmpdir=str(tmp_path / "tmp"),
        hosting=github_hosting_config,
    )
