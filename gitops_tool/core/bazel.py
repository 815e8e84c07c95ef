"""Build graph query engine adapter

The query engine is an external collaborator: it receives a query
expression and returns matching target descriptors. ``BazelQueryEngine``
drives ``bazel cquery --output=jsonproto``.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..api.exceptions import CommandError, QueryError
from ..constants import (
    BAZEL_BIN_DIR,
    BUILD_TARGET_PREFIX,
    DEPLOYMENT_BRANCH_ATTR,
    GITOPS_RULE_KIND,
    RELEASE_BRANCH_PREFIX_ATTR,
)
from ..models.release_train import Target, TargetDescriptor
from .commands import run_command

logger = logging.getLogger(__name__)


class QueryEngine(ABC):
    """Abstract build graph query engine"""

    @abstractmethod
    def query(self, expression: str) -> List[TargetDescriptor]:
        """
        Run a query expression

        Args:
            expression: Query expression

        Returns:
            Matching targets with their attributes

        Raises:
            QueryError: If the query fails or its output is malformed
        """
        pass


class BazelQueryEngine(QueryEngine):
    """Query engine backed by ``bazel cquery``"""

    def __init__(self, bazel_cmd: str = "bazel", workspace: Optional[str] = None):
        self.bazel_cmd = bazel_cmd
        self.workspace = workspace

    def query(self, expression: str) -> List[TargetDescriptor]:
        logger.info(f"Running Bazel Query: {expression}")
        command = [
            self.bazel_cmd, "cquery",
            "--output=jsonproto",
            "--noimplicit_deps",
            expression,
        ]
        try:
            output = run_command(command, cwd=self.workspace)
        except CommandError as e:
            raise QueryError(f"Bazel query failed: {e}", query=expression) from e
        return parse_cquery_output(output, expression)


def parse_cquery_output(output: str, expression: str = "") -> List[TargetDescriptor]:
    """Convert ``cquery --output=jsonproto`` output to target descriptors"""
    if not output.strip():
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise QueryError(f"Malformed query output: {e}", query=expression) from e
    if not isinstance(data, dict):
        raise QueryError("Malformed query output: expected an object", query=expression)

    descriptors = []
    for result in data.get("results", []):
        try:
            rule = result["target"]["rule"]
            name = rule["name"]
        except (KeyError, TypeError) as e:
            raise QueryError(f"Malformed query result: {result!r}", query=expression) from e
        descriptors.append(TargetDescriptor(
            name=name,
            kind=rule.get("ruleClass"),
            attributes=_parse_attributes(rule.get("attribute", [])),
        ))
    return descriptors


def _parse_attributes(attributes: List[Dict[str, Any]]) -> Dict[str, str]:
    parsed = {}
    for attribute in attributes:
        name = attribute.get("name")
        if not name:
            continue
        if "stringValue" in attribute:
            parsed[name] = attribute["stringValue"]
        elif "stringListValue" in attribute:
            parsed[name] = " ".join(attribute["stringListValue"])
        elif "intValue" in attribute:
            parsed[name] = str(attribute["intValue"])
        elif "booleanValue" in attribute:
            parsed[name] = str(attribute["booleanValue"]).lower()
    return parsed


def target_to_executable(target: Target, workspace: Optional[str] = None) -> Path:
    """
    Map a build label to its output executable

    ``//pkg/path:name`` becomes ``bazel-bin/pkg/path/name``. Anything that is
    not a label is returned as a path unchanged.
    """
    if target.startswith(BUILD_TARGET_PREFIX):
        executable = Path(BAZEL_BIN_DIR) / target[len(BUILD_TARGET_PREFIX):].replace(":", "/", 1)
    else:
        executable = Path(target)
    if workspace and not executable.is_absolute():
        executable = Path(workspace) / executable
    return executable


def release_trains_query(release_branch: str, targets: str) -> str:
    """Query selecting gitops targets of a release branch"""
    return (
        f'attr({DEPLOYMENT_BRANCH_ATTR}, ".+", '
        f'attr({RELEASE_BRANCH_PREFIX_ATTR}, "{release_branch}", '
        f'kind({GITOPS_RULE_KIND}, {targets})))'
    )


def push_dependencies_query(targets: Sequence[Target],
                            kinds: Sequence[str],
                            names: Sequence[str] = (),
                            attrs: Sequence[str] = ()) -> str:
    """
    Union of dependency filters over the given targets

    Args:
        targets: Changed gitops targets
        kinds: Rule kinds to select
        names: Name patterns to select
        attrs: ``attr=value`` filters, a missing value matches anything
    """
    deps = "set('{}')".format("' '".join(targets))
    queries = []
    for kind in kinds:
        queries.append(f"kind({kind}, deps({deps}))")
    for name in names:
        queries.append(f"filter({name}, deps({deps}))")
    for attr in attrs:
        attr_name, _, value = attr.partition("=")
        queries.append(f"attr({attr_name}, {value or '.*'}, deps({deps}))")
    if not queries:
        raise QueryError("No dependency filters configured for the push query")
    return " union ".join(queries)
