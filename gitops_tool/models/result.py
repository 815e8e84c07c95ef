"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .hosting import PullRequestResult
from .release_train import Target


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    IN_PROGRESS = "in_progress"


class BranchState(Enum):
    """How a deployment branch was selected for a train"""
    CREATED = "created"
    REUSED = "reused"
    RECREATED = "recreated"


@dataclass
class TrainResult:
    """Outcome of processing one release train against the checkout"""

    train: str
    branch: str
    branch_state: BranchState
    targets: List[Target] = field(default_factory=list)
    modified_files: List[str] = field(default_factory=list)
    committed: bool = False

    @property
    def has_changes(self) -> bool:
        return self.committed


@dataclass
class RunResult:
    """Accumulated outcome of one promotion run"""

    status: OperationStatus = OperationStatus.IN_PROGRESS
    message: str = ""
    trains: List[TrainResult] = field(default_factory=list)
    pushed: int = 0
    pull_requests: List[PullRequestResult] = field(default_factory=list)
    published: bool = False
    dry_run: bool = False
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def changed_trains(self) -> List[TrainResult]:
        return [train for train in self.trains if train.has_changes]

    @property
    def updated_targets(self) -> List[Target]:
        targets = []
        for train in self.changed_trains:
            targets.extend(train.targets)
        return targets

    @property
    def updated_branches(self) -> List[str]:
        return [train.branch for train in self.changed_trains]

    @property
    def modified_files(self) -> List[str]:
        """Changed files of every committed train, first-seen order"""
        files: List[str] = []
        for train in self.changed_trains:
            for path in train.modified_files:
                if path not in files:
                    files.append(path)
        return files

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_trains)

    @property
    def is_success(self) -> bool:
        return self.status in (OperationStatus.SUCCESS, OperationStatus.SKIPPED)

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def complete(self, status: OperationStatus, message: str = "") -> 'RunResult':
        """Mark operation as complete"""
        self.end_time = datetime.now()
        self.status = status
        if message:
            self.message = message
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "status": self.status.value,
            "message": self.message,
            "dry_run": self.dry_run,
            "trains": [
                {
                    "train": train.train,
                    "branch": train.branch,
                    "branch_state": train.branch_state.value,
                    "targets": list(train.targets),
                    "modified_files": list(train.modified_files),
                    "committed": train.committed,
                }
                for train in self.trains
            ],
            "pushed": self.pushed,
            "pull_requests": [
                {
                    "from_branch": pr.request.from_branch,
                    "to_branch": pr.request.to_branch,
                    "created": pr.created,
                    "url": pr.url,
                }
                for pr in self.pull_requests
            ],
            "published": self.published,
            "duration": self.duration,
        }
