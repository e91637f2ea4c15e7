"""Simple data models for AWS EBS volumes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class VolumeState(Enum):
    """EBS Volume states."""
    CREATING = "creating"
    AVAILABLE = "available"
    IN_USE = "in-use"
    DELETING = "deleting"
    DELETED = "deleted"
    ERROR = "error"


@dataclass(frozen=True)
class Attachment:
    """A volume attached to an instance at a device path."""
    device: str
    instance_id: str


@dataclass
class VolumeInfo:
    """Simple volume information model."""
    volume_id: str
    size: int
    state: VolumeState
    availability_zone: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)

    def attachments_for(self, instance_id: str) -> List[Attachment]:
        return [a for a in self.attachments if a.instance_id == instance_id]

    @classmethod
    def from_aws_volume(cls, volume: Dict[str, Any]) -> "VolumeInfo":
        """Create VolumeInfo from AWS volume data."""
        return cls(
            volume_id=volume["VolumeId"],
            size=volume.get("Size", 0),
            state=VolumeState(volume.get("State", "creating")),
            availability_zone=volume.get("AvailabilityZone"),
            attachments=[
                Attachment(device=a["Device"], instance_id=a["InstanceId"])
                for a in volume.get("Attachments", [])
                if a.get("Device") and a.get("InstanceId")
            ],
        )
