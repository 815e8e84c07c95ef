"""GitHub App backend

Authenticates as a GitHub App installation and publishes changes through
the git data API instead of pushing with local git.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from github import Auth, Github, GithubException, InputGitTreeElement

from ..api.exceptions import ConfigError, HostingError
from ..constants import GIT_BLOB_MODE
from ..models.config import HostingConfig
from ..models.hosting import FileEntry, PullRequest, PullRequestResult
from ..utils.async_utils import sync_to_async
from .base import HostingBackend

logger = logging.getLogger(__name__)

# Unprocessable Entity: ref or pull request already exists
ALREADY_EXISTS = 422


def collect_file_entries(root: Union[str, Path], paths: Sequence[str]) -> List[FileEntry]:
    """
    Expand repository-relative paths into file entries

    Directories are walked recursively. A path missing from the checkout is
    a deletion.

    Args:
        root: Checkout root
        paths: Repository-relative paths

    Returns:
        One entry per file

    Raises:
        HostingError: If no file was found
    """
    root = Path(root)
    entries: List[FileEntry] = []
    for path in paths:
        full_path = root / path
        if full_path.is_dir():
            for child in sorted(full_path.rglob("*")):
                if child.is_file():
                    entries.append(FileEntry(child.relative_to(root).as_posix(), child))
        elif full_path.exists():
            entries.append(FileEntry(Path(path).as_posix(), full_path))
        else:
            logger.info(f"File {path} is missing, treating it as deleted")
            entries.append(FileEntry(Path(path).as_posix()))

    if not entries:
        raise HostingError(f"No files found under {root} for {', '.join(paths)}")
    return entries


class GitHubAppBackend(HostingBackend):
    """Pull requests and API commits as a GitHub App installation"""

    def __init__(self, config: HostingConfig, repository: Any = None):
        """
        Initialize GitHub App backend

        Args:
            config: Backend configuration (app id, installation id, key path)
            repository: Pre-built PyGithub repository object (used by tests)
        """
        super().__init__(config)
        self.client: Optional[Github] = None
        self.repository = repository

    @property
    def full_name(self) -> str:
        return f"{self.config.repo_owner}/{self.config.repo}"

    async def _do_initialize(self) -> None:
        if self.repository is not None:
            return
        await sync_to_async(self._connect)()

    def _connect(self) -> None:
        key_path = Path(self.config.private_key)
        try:
            private_key = key_path.read_text()
        except OSError as e:
            raise ConfigError(f"Cannot read GitHub App private key {key_path}: {e}") from e

        app_auth = Auth.AppAuth(int(self.config.app_id), private_key)
        installation_auth = app_auth.get_installation_auth(int(self.config.installation_id))

        if self.config.enterprise_host:
            self.client = Github(
                auth=installation_auth,
                base_url=f"https://{self.config.enterprise_host}/api/v3",
            )
        else:
            self.client = Github(auth=installation_auth)

        try:
            self.repository = self.client.get_repo(self.full_name)
        except GithubException as e:
            raise HostingError(f"Cannot access repository {self.full_name}: {e}", status_code=e.status) from e
        logger.info(f"Authenticated as installation {self.config.installation_id} on {self.full_name}")

    async def create_pr(self,
                        from_branch: str,
                        to_branch: str,
                        title: str,
                        body: str) -> PullRequestResult:
        await self.initialize()
        request = PullRequest(from_branch, to_branch, title, body)
        return await sync_to_async(self._create_pull)(request)

    def _create_pull(self, request: PullRequest) -> PullRequestResult:
        try:
            pull = self.repository.create_pull(
                base=request.to_branch,
                head=request.from_branch,
                title=request.title,
                body=request.body,
                maintainer_can_modify=False,
                draft=False,
            )
        except GithubException as e:
            if e.status == ALREADY_EXISTS:
                logger.info(f"Reusing existing PR for {request.from_branch} -> {request.to_branch}")
                return PullRequestResult(request, created=False)
            logger.error(f"{self.name} response: {e.data}")
            raise HostingError(
                f"Failed to create PR {request.from_branch} -> {request.to_branch}: HTTP {e.status}",
                status_code=e.status,
                body=str(e.data),
            ) from e

        logger.info(f"Created PR: {pull.html_url}")
        return PullRequestResult(request, created=True, url=pull.html_url)

    async def create_commit(self,
                            base: str,
                            branch: str,
                            checkout_root: Union[str, Path],
                            files: Sequence[str],
                            title: str,
                            body: str) -> PullRequestResult:
        """
        Commit ``files`` on top of ``base`` through the API and open a PR

        Args:
            base: Branch the commit is parented on and the PR targets
            branch: Branch created (or moved) to point at the new commit
            checkout_root: Local checkout holding the file contents
            files: Repository-relative changed paths
            title: Commit and PR title
            body: PR body

        Returns:
            Result of the create-or-reuse PR call
        """
        await self.initialize()
        entries = collect_file_entries(checkout_root, files)
        await sync_to_async(self._commit_entries)(base, branch, entries, title)
        return await self.create_pr(branch, base, title, body)

    def _commit_entries(self,
                        base: str,
                        branch: str,
                        entries: Sequence[FileEntry],
                        message: str) -> str:
        repo = self.repository
        try:
            base_ref = repo.get_git_ref(f"heads/{base}")
            base_sha = base_ref.object.sha

            branch_ref = self._ensure_branch_ref(branch, base_sha)

            base_tree = repo.get_git_tree(base_sha)
            tree = repo.create_git_tree(
                [self._tree_element(entry) for entry in entries],
                base_tree,
            )
            parent = repo.get_git_commit(base_sha)
            commit = repo.create_git_commit(message, tree, [parent])
            branch_ref.edit(commit.sha, force=True)
        except GithubException as e:
            logger.error(f"{self.name} response: {e.data}")
            raise HostingError(
                f"Failed to commit {len(entries)} file(s) to {branch}: HTTP {e.status}",
                status_code=e.status,
                body=str(e.data),
            ) from e

        logger.info(f"Committed {commit.sha} to {branch} with {len(entries)} file(s)")
        return commit.sha

    def _ensure_branch_ref(self, branch: str, sha: str):
        try:
            return self.repository.create_git_ref(f"refs/heads/{branch}", sha)
        except GithubException as e:
            if e.status != ALREADY_EXISTS:
                raise
            logger.info(f"Branch {branch} already exists, moving it")
            return self.repository.get_git_ref(f"heads/{branch}")

    @staticmethod
    def _tree_element(entry: FileEntry) -> InputGitTreeElement:
        if entry.is_deleted:
            return InputGitTreeElement(entry.relative_path, GIT_BLOB_MODE, "blob", sha=None)
        return InputGitTreeElement(
            entry.relative_path,
            GIT_BLOB_MODE,
            "blob",
            content=entry.full_path.read_text(encoding="utf-8"),
        )

    async def _do_close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
