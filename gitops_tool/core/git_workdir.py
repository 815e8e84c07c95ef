"""Git working directory for the GitOps checkout

One ``GitWorkdir`` owns the temporary clone for the whole run. Branch
switches mutate the shared working tree, so callers must use it from a
single task at a time.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..api.exceptions import GitError
from ..constants import DEFAULT_REMOTE
from .commands import run_command

logger = logging.getLogger(__name__)


class GitWorkdir:
    """Git operations on one checkout directory"""

    def __init__(self, directory: Union[str, Path], remote: str = DEFAULT_REMOTE):
        """
        Initialize working directory wrapper

        Args:
            directory: Checkout root
            remote: Remote name used for pushes
        """
        self.directory = Path(directory)
        self.remote = remote

    @classmethod
    def clone(cls,
              repo: str,
              directory: Union[str, Path],
              primary_branch: str,
              gitops_path: Optional[str] = None,
              mirror: Optional[str] = None) -> 'GitWorkdir':
        """
        Clone ``repo`` into ``directory`` and check out ``primary_branch``

        Blobs are fetched lazily and the working tree is restricted to
        ``gitops_path`` with a sparse checkout.

        Args:
            repo: Repository URL
            directory: Destination directory
            primary_branch: Branch to check out
            gitops_path: Subdirectory holding generated manifests
            mirror: Optional local mirror used as object reference

        Returns:
            GitWorkdir for the new checkout
        """
        directory = Path(directory)
        logger.info(f"Cloning {repo} ({primary_branch}) into {directory}")
        args = [
            "git", "clone",
            "--no-checkout",
            "--filter=blob:none",
            "--no-tags",
            "--origin", DEFAULT_REMOTE,
            "--branch", primary_branch,
        ]
        if mirror:
            args.extend(["--reference", mirror])
        args.extend([repo, str(directory)])
        run_command(args, error_class=GitError)

        workdir = cls(directory)
        if gitops_path:
            workdir._git("config", "--local", "core.sparsecheckout", "true")
            sparse_file = directory / ".git" / "info" / "sparse-checkout"
            sparse_file.parent.mkdir(parents=True, exist_ok=True)
            sparse_file.write_text(f"{gitops_path.strip('/')}/\n")
        workdir._git("checkout", primary_branch, "--")
        return workdir

    def _git(self, *args: str) -> str:
        return run_command(["git", *args], cwd=self.directory, error_class=GitError)

    def switch_to_branch(self, branch: str, base: str) -> bool:
        """
        Check out ``branch``, creating it from ``base`` when missing

        Returns:
            True if the branch was created, False if it already existed
        """
        try:
            self._git("checkout", branch, "--")
            logger.info(f"Switched to existing branch {branch}")
            return False
        except GitError:
            logger.info(f"Branch {branch} does not exist, creating it from {base}")

        self._git("branch", branch, base)
        self._git("checkout", branch, "--")
        return True

    def recreate_branch(self, branch: str, base: str) -> None:
        """Discard ``branch`` and recreate it from the head of ``base``"""
        logger.info(f"Recreating branch {branch} from {base}")
        self._git("checkout", base, "--")
        self._git("branch", "-f", branch, base)
        self._git("checkout", branch, "--")

    def last_commit_message(self) -> str:
        return self._git("log", "-1", "--format=%B")

    def stage(self, path: Optional[str] = None) -> None:
        """Stage additions, modifications and deletions under ``path``"""
        self._git("add", "-A", "--", path or ".")

    def modified_files(self, path: Optional[str] = None) -> List[str]:
        """
        Paths changed relative to the branch tip

        Stages ``path`` first so new and deleted files are included.

        Returns:
            Repository-relative paths
        """
        self.stage(path)
        output = self._git("diff", "--cached", "--name-only", "--no-renames")
        return [line for line in output.splitlines() if line.strip()]

    def commit(self, message: str, gitops_path: Optional[str] = None) -> bool:
        """
        Commit staged changes under ``gitops_path``

        Returns:
            True if a commit was created, False if there was nothing to commit
        """
        if not self.modified_files(gitops_path):
            return False
        self._git("commit", "-m", message)
        return True

    def push(self, branches: Sequence[str]) -> None:
        """Force push ``branches`` to the remote"""
        if not branches:
            return
        logger.info(f"Pushing branches: {', '.join(branches)}")
        self._git("push", "-f", self.remote, *branches)
