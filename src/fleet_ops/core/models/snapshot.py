"""Simple data models for AWS EBS snapshot management."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class SnapshotState(Enum):
    """EBS Snapshot states."""
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class SnapshotInfo:
    """Simple snapshot information model."""
    snapshot_id: str
    volume_size: int
    state: SnapshotState
    description: str = ""
    progress: str = ""

    @property
    def is_completed(self) -> bool:
        return self.state is SnapshotState.COMPLETED

    @property
    def size_label(self) -> str:
        return f"{self.volume_size}G"

    def table_row(self) -> List[Any]:
        return [
            self.snapshot_id,
            self.description,
            self.size_label,
            self.state,
            self.progress,
        ]

    @classmethod
    def from_aws_snapshot(cls, snapshot: Dict[str, Any]) -> "SnapshotInfo":
        """Create SnapshotInfo from AWS snapshot data."""
        return cls(
            snapshot_id=snapshot["SnapshotId"],
            volume_size=snapshot.get("VolumeSize", 0),
            state=SnapshotState(snapshot.get("State", "pending")),
            description=snapshot.get("Description", ""),
            progress=snapshot.get("Progress", ""),
        )
