"""Create PRs command implementation"""

import os
import sys

import click

from ..utils.output import format_run_result, print_error
from ...api.exceptions import GitopsToolError
from ...constants import (
    ENV_CONFIG_PATH,
    ENV_GITHUB_TOKEN,
    ENV_GITLAB_TOKEN,
    ENV_BITBUCKET_TOKEN,
)
from ...hosting.factory import HostingFactory
from ...models.config import CIContext
from ...services.config_service import ConfigService
from ...services.gitops_service import GitopsService
from ...utils.async_utils import run_async


@click.command(name='create-prs')
@click.option('--config', 'config_path', envvar=ENV_CONFIG_PATH, default=None,
              type=click.Path(dir_okay=False),
              help='Configuration file (defaults to .gitops-tool.yaml if present)')
# Git
@click.option('--git-repo', default=None, help='GitOps repository URL')
@click.option('--git-mirror', default=None, help='Local mirror used as clone reference')
@click.option('--git-host', default=None,
              type=click.Choice(HostingFactory.get_supported_types(), case_sensitive=False),
              help='Hosting backend used to open merge requests')
@click.option('--branch-name', default=None, help='Source branch of this build')
@click.option('--git-commit', default=None, help='Source commit of this build')
@click.option('--release-branch', default=None,
              help='Release branch prefix selecting the gitops targets')
@click.option('--pr-target-branch', default=None,
              help='Branch deployment branches are based on and merged into')
# Build tool
@click.option('--bazel-cmd', default=None, help='Bazel executable')
@click.option('--workspace', default=None, type=click.Path(file_okay=False),
              help='Bazel workspace root')
@click.option('--targets', default=None, help='Target pattern to scan for gitops targets')
# GitOps
@click.option('--gitops-path', default=None, help='Checkout subdirectory holding manifests')
@click.option('--gitops-tmpdir', default=None, type=click.Path(file_okay=False),
              help='Directory for the temporary checkout')
@click.option('--push-parallelism', default=None, type=int,
              help='Number of image pushes run at the same time')
@click.option('--dry-run', is_flag=True, help='Do everything except publishing')
# Pull request
@click.option('--pr-title', default=None, help='Merge request title')
@click.option('--pr-body', default=None, help='Merge request body')
@click.option('--deployment-branch-suffix', default=None,
              help='Suffix appended to deploy/<train> branch names')
# Pre-resolved inputs
@click.option('--resolved-binary', 'resolved_binaries', multiple=True,
              help='Pre-resolved gitops binary (format: train:binary)')
@click.option('--resolved-push', 'resolved_pushes', multiple=True,
              help='Pre-resolved image push command')
# Push dependency filters
@click.option('--dependency-kind', 'dependency_kinds', multiple=True,
              help='Rule kind of image push dependencies')
@click.option('--dependency-name', 'dependency_names', multiple=True,
              help='Name regex of image push dependencies')
@click.option('--dependency-attr', 'dependency_attrs', multiple=True,
              help='Attribute of image push dependencies (format: name[=value])')
# Hosting
@click.option('--api-url', default=None, help='Hosting API root URL')
@click.option('--token', default=None,
              envvar=[ENV_GITHUB_TOKEN, ENV_GITLAB_TOKEN, ENV_BITBUCKET_TOKEN],
              help='Hosting API token')
@click.option('--repo-owner', default=None, help='GitHub repository owner')
@click.option('--repo', default=None, help='GitHub or Bitbucket repository name')
@click.option('--project', default=None, help='GitLab project or Bitbucket project key')
@click.option('--app-id', default=None, type=int, help='GitHub App id')
@click.option('--installation-id', default=None, type=int, help='GitHub App installation id')
@click.option('--private-key', default=None, type=click.Path(dir_okay=False),
              help='GitHub App private key file')
@click.option('--enterprise-host', default=None, help='GitHub Enterprise hostname')
@click.pass_context
def create_prs(ctx, config_path, git_host, api_url, token, repo_owner, repo, project,
               app_id, installation_id, private_key, enterprise_host, dry_run, **options):
    """Regenerate manifests and open merge requests for release trains

    Options given on the command line override values from the
    configuration file.

    Examples:
        # Query mode, Bitbucket Server
        gitops-tool create-prs --git-repo git@git.example.com:ops/gitops.git \\
            --release-branch master --git-host bitbucket \\
            --api-url https://git.example.com --project OPS --repo gitops

        # Pre-resolved binaries, no publishing
        gitops-tool create-prs --resolved-binary prod:/path/to/prod.gitops --dry-run
    """
    overrides = dict(options)
    overrides['dry_run'] = True if dry_run else None
    overrides['hosting'] = {
        'type': git_host.lower() if git_host else None,
        'api_url': api_url,
        'token': token,
        'repo_owner': repo_owner,
        'repo': repo,
        'project': project,
        'app_id': app_id,
        'installation_id': installation_id,
        'private_key': private_key,
        'enterprise_host': enterprise_host,
    }

    try:
        config = ConfigService(config_path).load_config(overrides)
        ci = CIContext.from_env(os.environ)
        if ci.is_available:
            config.ci = ci

        result = run_async(GitopsService(config).run())
    except GitopsToolError as e:
        print_error(e, title="GitOps Error")
        if ctx.obj and ctx.obj.get('debug'):
            raise
        sys.exit(1)

    format_run_result(result)
