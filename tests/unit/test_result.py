"""Unit tests for run result models."""

from gitops_tool.models.hosting import PullRequest, PullRequestResult
from gitops_tool.models.result import BranchState, OperationStatus, RunResult, TrainResult


def train_result(name, committed, files=(), targets=()):
    return TrainResult(
        train=name,
        branch=f"deploy/{name}",
        branch_state=BranchState.CREATED,
        targets=list(targets),
        modified_files=list(files),
        committed=committed,
    )


class TestRunResult:
    def setup_method(self):
        self.result = RunResult(trains=[
            train_result("prod", True, ["cloud/a.yaml", "cloud/b.yaml"], ["//a:gitops"]),
            train_result("staging", False, ["cloud/c.yaml"], ["//c:gitops"]),
            train_result("canary", True, ["cloud/b.yaml", "cloud/d.yaml"], ["//d:gitops"]),
        ])

    def test_changed_trains(self):
        assert self.result.updated_branches == ["deploy/prod", "deploy/canary"]
        assert self.result.updated_targets == ["//a:gitops", "//d:gitops"]
        assert self.result.has_changes

    def test_modified_files_deduplicated(self):
        assert self.result.modified_files == ["cloud/a.yaml", "cloud/b.yaml", "cloud/d.yaml"]

    def test_complete(self):
        assert self.result.duration is None
        self.result.complete(OperationStatus.SUCCESS, "done")
        assert self.result.is_success
        assert self.result.message == "done"
        assert self.result.duration >= 0

    def test_skipped_is_success(self):
        assert RunResult().complete(OperationStatus.SKIPPED).is_success
        assert not RunResult().complete(OperationStatus.FAILED).is_success

    def test_to_dict(self):
        request = PullRequest("deploy/prod", "master", "t", "b")
        self.result.pull_requests.append(PullRequestResult(request, created=False))
        data = self.result.complete(OperationStatus.SUCCESS).to_dict()

        assert data["status"] == "success"
        assert data["trains"][0]["branch_state"] == "created"
        assert data["pull_requests"] == [
            {"from_branch": "deploy/prod", "to_branch": "master", "created": False, "url": None}
        ]
