"""Bounded parallel image push execution"""

import logging
import shlex
from typing import Awaitable, Callable, List, Optional, Sequence

from ..models.config import GitopsConfig
from ..models.release_train import Target
from ..utils.async_utils import TaskPool
from .bazel import QueryEngine, push_dependencies_query, target_to_executable
from .commands import run_command_async

logger = logging.getLogger(__name__)

CommandExecutor = Callable[[List[str]], Awaitable[str]]


class PushCoordinator:
    """Run image push commands with at most ``parallelism`` in flight

    Two producers feed the same pool: pre-resolved push commands handed in
    by the caller, or push targets found by querying the dependencies of
    the changed gitops targets. Any failure aborts the run; images pushed
    before the failure stay pushed.
    """

    def __init__(self,
                 config: GitopsConfig,
                 query_engine: Optional[QueryEngine] = None,
                 executor: Optional[CommandExecutor] = None):
        """
        Initialize push coordinator

        Args:
            config: Run configuration
            query_engine: Build graph query engine for query mode
            executor: Runs one command, defaults to a subprocess
        """
        self.config = config
        self.query_engine = query_engine
        self.executor = executor or self._execute

    @property
    def parallelism(self) -> int:
        return self.config.push_parallelism

    async def push_resolved(self, commands: Optional[Sequence[str]] = None) -> int:
        """
        Execute pre-resolved push commands

        Args:
            commands: Shell-style command strings, defaults to the
                configured resolved pushes

        Returns:
            Number of commands executed
        """
        if commands is None:
            commands = self.config.resolved_pushes
        pool: TaskPool[List[str]] = TaskPool(self.executor, self.parallelism)
        count = await pool.run(shlex.split(command) for command in commands)
        logger.info(f"Executed {count} resolved push command(s)")
        return count

    async def push_changed(self, targets: Sequence[Target]) -> int:
        """
        Push every image the changed targets depend on

        Args:
            targets: Gitops targets that produced changes

        Returns:
            Number of push targets executed
        """
        if not targets:
            return 0
        if self.query_engine is None:
            raise ValueError("Query mode requires a query engine")

        query = push_dependencies_query(
            targets,
            self.config.dependency_kinds,
            self.config.dependency_names,
            self.config.dependency_attrs,
        )
        push_targets = [descriptor.name for descriptor in self.query_engine.query(query)]

        pool: TaskPool[List[str]] = TaskPool(self.executor, self.parallelism)
        count = await pool.run(self.push_command(target) for target in push_targets)
        logger.info(f"Executed {count} push target(s)")
        return count

    def push_command(self, target: Target) -> List[str]:
        """Run the built executable directly, or go through ``bazel run``"""
        executable = target_to_executable(target, self.config.workspace)
        if executable.is_file():
            return [str(executable)]
        logger.info(f"Target {target} is not a file, running as command")
        return [self.config.bazel_cmd, "run", target]

    async def _execute(self, command: List[str]) -> str:
        return await run_command_async(command, cwd=self.config.workspace)
