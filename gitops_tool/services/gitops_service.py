"""GitOps promotion service

Sequences one run: plan release trains, regenerate manifests on a
temporary checkout, push images, then publish the changed branches as
merge requests.
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

from ..constants import GITOPS_TMPDIR_PREFIX, HostingType
from ..core.bazel import BazelQueryEngine, QueryEngine
from ..core.git_workdir import GitWorkdir
from ..core.push_coordinator import CommandExecutor, PushCoordinator
from ..core.release_train import ReleaseTrainPlanner
from ..core.train_processor import TargetRunner, TrainProcessor
from ..hosting.base import HostingBackend
from ..hosting.factory import HostingFactory
from ..models.config import GitopsConfig
from ..models.hosting import PullRequest
from ..models.release_train import ReleaseTrain, Target
from ..models.result import OperationStatus, RunResult

logger = logging.getLogger(__name__)

WorkdirFactory = Callable[[Path], GitWorkdir]


class GitopsService:
    """Promotion workflow for one configuration"""

    def __init__(self,
                 config: GitopsConfig,
                 query_engine: Optional[QueryEngine] = None,
                 hosting: Optional[HostingBackend] = None,
                 workdir_factory: Optional[WorkdirFactory] = None,
                 target_runner: Optional[TargetRunner] = None,
                 push_executor: Optional[CommandExecutor] = None):
        """
        Initialize GitOps service

        Args:
            config: Run configuration
            query_engine: Build graph query engine, defaults to bazel cquery
            hosting: Hosting backend, defaults to the configured one
            workdir_factory: Creates the checkout in a given directory,
                defaults to a sparse clone of ``config.git_repo``
            target_runner: Runs one gitops target against the checkout
            push_executor: Runs one image push command
        """
        self.config = config
        self._query_engine = query_engine
        self._hosting = hosting
        self.workdir_factory = workdir_factory or self._clone
        self.target_runner = target_runner
        self.push_executor = push_executor

    @property
    def query_engine(self) -> QueryEngine:
        if self._query_engine is None:
            self._query_engine = BazelQueryEngine(self.config.bazel_cmd, self.config.workspace)
        return self._query_engine

    @property
    def hosting(self) -> HostingBackend:
        if self._hosting is None:
            self._hosting = HostingFactory.create(self.config.hosting)
        return self._hosting

    async def run(self) -> RunResult:
        """
        Execute the whole promotion

        Returns:
            Run summary. SKIPPED when no release train applies.

        Raises:
            GitopsToolError: On the first failing step
        """
        result = RunResult(dry_run=self.config.dry_run)
        self.config.validate()

        trains = self.plan()
        if not trains:
            logger.info(f"No release trains found for {self.config.release_branch}")
            return result.complete(OperationStatus.SKIPPED, "No release trains found")

        tmp_root = Path(self.config.gitops_tmpdir)
        tmp_root.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix=GITOPS_TMPDIR_PREFIX, dir=tmp_root) as checkout:
            workdir = self.workdir_factory(Path(checkout))
            processor = TrainProcessor(self.config, workdir, self.target_runner)

            for train in trains:
                logger.info(f"Processing release train {train.name}")
                result.trains.append(processor.process(train))

            if not result.has_changes:
                logger.info("No changes detected")
                return result.complete(OperationStatus.SUCCESS, "No changes")

            result.pushed = await self.push_images(result.updated_targets)

            if self.config.dry_run:
                logger.info("Dry run, skipping publish")
                return result.complete(OperationStatus.SUCCESS, "Dry run")

            await self.publish(workdir, result)

        return result.complete(
            OperationStatus.SUCCESS,
            f"Updated {len(result.updated_branches)} branch(es)"
        )

    def plan(self) -> List[ReleaseTrain]:
        """Release trains from resolved bindings, else from a build graph query"""
        if self.config.resolved_binaries:
            return ReleaseTrainPlanner.from_resolved_binaries(self.config.resolved_binaries)
        return ReleaseTrainPlanner.from_query(
            self.query_engine,
            self.config.release_branch,
            self.config.targets,
        )

    async def push_images(self, targets: List[Target]) -> int:
        """Push pre-resolved commands, or the images the changed targets depend on"""
        if self.config.resolved_pushes:
            coordinator = PushCoordinator(self.config, executor=self.push_executor)
            return await coordinator.push_resolved()

        coordinator = PushCoordinator(self.config, self.query_engine, self.push_executor)
        return await coordinator.push_changed(targets)

    async def publish(self, workdir: GitWorkdir, result: RunResult) -> None:
        """Publish changed branches and record the merge requests in ``result``"""
        base = self.config.pr_target_branch

        async with self.hosting as hosting:
            if self.config.git_host == HostingType.GITHUB_APP:
                text = self.config.pull_request_text(self.config.branch_name)
                pull_request = await hosting.create_commit(
                    base,
                    self.config.branch_name,
                    workdir.directory,
                    result.modified_files,
                    text["title"],
                    text["body"],
                )
                result.pull_requests.append(pull_request)
            else:
                branches = result.updated_branches
                workdir.push(branches)
                for branch in branches:
                    text = self.config.pull_request_text(branch)
                    request = PullRequest(branch, base, text["title"], text["body"])
                    result.pull_requests.append(await hosting.open(request))

        result.published = True

    def _clone(self, directory: Path) -> GitWorkdir:
        return GitWorkdir.clone(
            self.config.git_repo,
            directory,
            self.config.pr_target_branch,
            gitops_path=self.config.gitops_path,
            mirror=self.config.git_mirror,
        )
