"""Global constants for gitops-tool"""

from enum import Enum

APP_NAME = "gitops-tool"
LOG_FORMAT = "%(message)s"

# Project identification
PROJECT_CONFIG_FILE = ".gitops-tool.yaml"

# Manifest stream format
DOCUMENT_SEPARATOR = "---\n"
BUILD_TARGET_PREFIX = "//"
RELATIVE_TARGET_PREFIX = ":"
DIGEST_PREFIX = "@"
IMAGE_URL_ENV_MARKER = "IMAGE_URL"
SINGLE_CONTAINER_KEYS = ("container", "spec")
CONTAINER_LIST_KEYS = ("containers", "initContainers")
INIT_CONTAINERS_KEY = "initContainers"
JSON_DOCUMENT_START = "{"

# Commit message markers
COMMIT_TARGETS_BEGIN = "--- gitops targets begin ---"
COMMIT_TARGETS_END = "--- gitops targets end ---"

# Branch naming
DEPLOY_BRANCH_PREFIX = "deploy/"

# Build tool
DEFAULT_BAZEL_CMD = "tools/bazel"
DEFAULT_TARGETS = "//... except //experimental/..."
BAZEL_BIN_DIR = "bazel-bin"
GITOPS_RULE_KIND = "gitops"
DEPLOYMENT_BRANCH_ATTR = "deployment_branch"
RELEASE_BRANCH_PREFIX_ATTR = "release_branch_prefix"
DEFAULT_DEPENDENCY_KINDS = ["k8s_container_push", "push_oci"]
NO_PUSH_FLAG = "--nopush"
DEPLOYMENT_ROOT_FLAG = "--deployment_root"

# Git defaults
DEFAULT_REMOTE = "origin"
DEFAULT_PRIMARY_BRANCH = "master"
DEFAULT_GITOPS_PATH = "cloud"
DEFAULT_PUSH_PARALLELISM = 1
GITOPS_TMPDIR_PREFIX = "gitops"

# Hosting defaults
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITLAB_API_URL = "https://gitlab.com/api/v4"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_GITHUB_APP_PRIVATE_KEY = "/var/run/agent-secrets/buildkite-agent/secrets/github-pr-creator-key"
GIT_BLOB_MODE = "100644"


class HostingType(Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    GITHUB_APP = "github_app"


# Error codes
class ErrorCode:
    CONFIG_ERROR = "GT001"
    QUERY_FAILED = "GT002"
    MANIFEST_DECODE_FAILED = "GT003"
    MANIFEST_IDENTITY_MISSING = "GT004"
    UNRESOLVED_IMAGE = "GT005"
    COMMAND_FAILED = "GT006"
    GIT_FAILED = "GT007"
    HOSTING_FAILED = "GT008"


# Environment variables
ENV_CONFIG_PATH = "GITOPS_TOOL_CONFIG"
ENV_CI_PIPELINE_SLUG = "BUILDKITE_PIPELINE_SLUG"
ENV_CI_BUILD_URL = "BUILDKITE_BUILD_URL"
ENV_CI_REPO = "BUILDKITE_REPO"
ENV_CI_COMMIT = "BUILDKITE_COMMIT"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_GITLAB_TOKEN = "GITLAB_TOKEN"
ENV_BITBUCKET_TOKEN = "BITBUCKET_TOKEN"

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ARROW = "→"
