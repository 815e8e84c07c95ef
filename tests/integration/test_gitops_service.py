"""Integration tests for the promotion workflow with fake collaborators."""

from pathlib import Path

import pytest

from gitops_tool.api.exceptions import CommandError, ConfigError
from gitops_tool.models.config import HostingConfig
from gitops_tool.models.result import OperationStatus
from gitops_tool.services.gitops_service import GitopsService


class Harness:
    """Wires a GitopsService to in-memory collaborators"""

    def __init__(self, config, make_workdir, make_hosting, engine=None, runner=None, **workdir_options):
        self.config = config
        self.make_workdir = make_workdir
        self.workdir_options = workdir_options
        self.workdir = None
        self.checkout_dirs = []
        self.ran = []
        self.pushes = []
        self.hosting = make_hosting(config.hosting)
        self.service = GitopsService(
            config,
            query_engine=engine,
            hosting=self.hosting,
            workdir_factory=self.workdir_factory,
            target_runner=runner or self.ran.append,
            push_executor=self.push,
        )

    def workdir_factory(self, directory):
        self.checkout_dirs.append(directory)
        self.workdir = self.make_workdir(**self.workdir_options)
        self.workdir.directory = directory
        return self.workdir

    async def push(self, command):
        self.pushes.append(command)
        return ""


class TestGitopsService:
    @pytest.mark.asyncio
    async def test_full_run_with_resolved_inputs(self, gitops_config, make_workdir, make_hosting):
        gitops_config.resolved_binaries = [
            "prod:bazel-bin/svc/api/prod",
            "staging:bazel-bin/svc/api/staging",
        ]
        gitops_config.resolved_pushes = ["bazel-bin/img/api_push"]
        harness = Harness(
            gitops_config, make_workdir, make_hosting,
            changes={"deploy/prod": ["cloud/prod/api.yaml"]},
        )

        result = await harness.service.run()

        assert result.status == OperationStatus.SUCCESS
        assert harness.ran == ["bazel-bin/svc/api/prod", "bazel-bin/svc/api/staging"]
        assert result.updated_branches == ["deploy/prod"]
        assert harness.pushes == [["bazel-bin/img/api_push"]]
        assert result.pushed == 1
        assert harness.workdir.pushed == ["deploy/prod"]
        assert [(r.from_branch, r.to_branch, r.title) for r in harness.hosting.requests] == [
            ("deploy/prod", "master", "GitOps deployment deploy/prod")
        ]
        assert result.published
        assert harness.hosting.closed

    @pytest.mark.asyncio
    async def test_checkout_removed_after_run(self, gitops_config, make_workdir, make_hosting):
        gitops_config.resolved_binaries = ["prod:bin"]
        harness = Harness(gitops_config, make_workdir, make_hosting)

        await harness.service.run()

        checkout = harness.checkout_dirs[0]
        assert checkout.parent == Path(gitops_config.gitops_tmpdir)
        assert checkout.name.startswith("gitops")
        assert not checkout.exists()

    @pytest.mark.asyncio
    async def test_checkout_removed_on_failure(self, gitops_config, make_workdir, make_hosting):
        gitops_config.resolved_binaries = ["prod:bin"]

        def failing(target):
            raise CommandError([target], 1, "generation failed")

        harness = Harness(gitops_config, make_workdir, make_hosting, runner=failing)

        with pytest.raises(CommandError):
            await harness.service.run()
        assert not harness.checkout_dirs[0].exists()
        assert harness.hosting.requests == []

    @pytest.mark.asyncio
    async def test_no_trains(self, gitops_config, make_workdir, make_hosting, make_query_engine):
        engine = make_query_engine()
        harness = Harness(gitops_config, make_workdir, make_hosting, engine=engine)

        result = await harness.service.run()

        assert result.status == OperationStatus.SKIPPED
        assert result.is_success
        assert harness.checkout_dirs == []
        assert len(engine.queries) == 1

    @pytest.mark.asyncio
    async def test_no_changes(self, gitops_config, make_workdir, make_hosting):
        gitops_config.resolved_binaries = ["prod:bin"]
        gitops_config.resolved_pushes = ["push"]
        harness = Harness(gitops_config, make_workdir, make_hosting)

        result = await harness.service.run()

        assert result.status == OperationStatus.SUCCESS
        assert not result.has_changes
        assert harness.pushes == []
        assert harness.hosting.requests == []
        assert not result.published

    @pytest.mark.asyncio
    async def test_dry_run_pushes_but_does_not_publish(self, gitops_config, make_workdir, make_hosting):
        gitops_config.dry_run = True
        gitops_config.hosting = HostingConfig(type="github")
        gitops_config.resolved_binaries = ["prod:bin"]
        gitops_config.resolved_pushes = ["push"]
        harness = Harness(
            gitops_config, make_workdir, make_hosting,
            changes={"deploy/prod": ["cloud/prod/api.yaml"]},
        )

        result = await harness.service.run()

        assert result.dry_run
        assert result.pushed == 1
        assert harness.workdir.pushed == []
        assert harness.hosting.requests == []
        assert not result.published

    @pytest.mark.asyncio
    async def test_query_mode(self, gitops_config, make_workdir, make_hosting,
                              make_query_engine, make_descriptor):
        engine = make_query_engine([
            [
                make_descriptor("//svc/api:prod", deployment_branch="prod"),
                make_descriptor("//svc/web:prod", deployment_branch="prod"),
            ],
            [make_descriptor("//img:api_push")],
        ])
        harness = Harness(
            gitops_config, make_workdir, make_hosting, engine=engine,
            changes={"deploy/prod": ["cloud/prod/api.yaml"]},
        )

        result = await harness.service.run()

        assert harness.ran == ["//svc/api:prod", "//svc/web:prod"]
        assert engine.queries[0].startswith("attr(deployment_branch")
        assert "deps(set('//svc/api:prod' '//svc/web:prod'))" in engine.queries[1]
        assert harness.pushes == [["tools/bazel", "run", "//img:api_push"]]
        assert result.updated_targets == ["//svc/api:prod", "//svc/web:prod"]

    @pytest.mark.asyncio
    async def test_github_app_commits_through_api(self, gitops_config, make_workdir, make_hosting):
        gitops_config.hosting = HostingConfig(
            type="github_app", repo_owner="acme", repo="gitops", app_id=1, installation_id=2
        )
        gitops_config.resolved_binaries = ["prod:bin-prod", "staging:bin-staging"]
        gitops_config.resolved_pushes = ["bazel-bin/img/push"]
        harness = Harness(
            gitops_config, make_workdir, make_hosting,
            changes={
                "deploy/prod": ["cloud/prod/api.yaml"],
                "deploy/staging": ["cloud/staging/api.yaml", "cloud/prod/api.yaml"],
            },
        )

        result = await harness.service.run()

        assert harness.workdir.pushed == []
        assert harness.hosting.commits == [{
            "base": "master",
            "branch": "feature/login",
            "checkout_root": harness.checkout_dirs[0],
            "files": ["cloud/prod/api.yaml", "cloud/staging/api.yaml"],
        }]
        assert harness.hosting.requests[0].from_branch == "feature/login"
        assert result.published

    @pytest.mark.asyncio
    async def test_invalid_config_fails_before_work(self, gitops_config, make_workdir, make_hosting):
        gitops_config.push_parallelism = 0
        gitops_config.resolved_binaries = ["prod:bin"]
        harness = Harness(gitops_config, make_workdir, make_hosting)

        with pytest.raises(ConfigError):
            await harness.service.run()
        assert harness.checkout_dirs == []
        assert harness.ran == []
