"""Release train state machine

For each train: select the deployment branch (create, reuse or recreate),
run every target's manifest generator against the checkout, then commit
whatever changed. Trains run one after another on the shared checkout.
"""

import logging
from typing import Callable, Optional

from ..constants import NO_PUSH_FLAG, DEPLOYMENT_ROOT_FLAG
from ..models.config import GitopsConfig
from ..models.release_train import ReleaseTrain, Target
from ..models.result import BranchState, TrainResult
from . import commit_message
from .bazel import target_to_executable
from .commands import run_command
from .git_workdir import GitWorkdir
from .release_train import needs_recreation

logger = logging.getLogger(__name__)

TargetRunner = Callable[[Target], None]


class TrainProcessor:
    """Apply release trains to a GitOps checkout"""

    def __init__(self,
                 config: GitopsConfig,
                 workdir: GitWorkdir,
                 target_runner: Optional[TargetRunner] = None):
        """
        Initialize train processor

        Args:
            config: Run configuration
            workdir: Checkout shared by every train
            target_runner: Runs one target's manifest generator, defaults to
                executing it with --nopush against the checkout root
        """
        self.config = config
        self.workdir = workdir
        self.target_runner = target_runner or self._run_target

    def process(self, train: ReleaseTrain) -> TrainResult:
        """Run one train through branch selection, generation and commit"""
        branch = train.branch_name(self.config.deployment_branch_suffix)
        base = self.config.pr_target_branch

        state = self._select_branch(train, branch, base)

        for target in train.targets:
            self.target_runner(target)

        result = TrainResult(
            train=train.name,
            branch=branch,
            branch_state=state,
            targets=list(train.targets),
        )
        result.modified_files = self.workdir.modified_files(self.config.gitops_path)
        logger.info(f"Modified files for {branch}: {result.modified_files}")

        message = commit_message.compose(
            self.config.release_branch,
            self.config.branch_name,
            self.config.git_commit,
            train.targets,
        )
        result.committed = self.workdir.commit(message, self.config.gitops_path)
        if result.committed:
            logger.info(f"Branch {branch} has changes, push required")
        else:
            logger.info(f"Branch {branch} is clean")
        return result

    def _select_branch(self, train: ReleaseTrain, branch: str, base: str) -> BranchState:
        if self.workdir.switch_to_branch(branch, base):
            return BranchState.CREATED

        previous = commit_message.extract_targets(self.workdir.last_commit_message())
        if needs_recreation(previous, train.targets):
            removed = [target for target in previous if target not in train]
            logger.info(f"Targets removed from {train.name}: {', '.join(removed)}")
            self.workdir.recreate_branch(branch, base)
            return BranchState.RECREATED
        return BranchState.REUSED

    def _run_target(self, target: Target) -> None:
        executable = target_to_executable(target, self.config.workspace)
        run_command([
            executable,
            NO_PUSH_FLAG,
            DEPLOYMENT_ROOT_FLAG, self.workdir.directory,
        ], cwd=self.config.workspace)
