"""Simple Instance Data Models

Simple data models for AWS EC2 instances."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class InstanceState(Enum):
    """EC2 Instance states."""
    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class InstanceInfo:
    """Simple instance information model."""
    instance_id: str
    instance_type: str
    image_id: str
    state: InstanceState
    public_ip: Optional[str] = None
    public_dns: Optional[str] = None
    security_groups: List[str] = field(default_factory=list)
    availability_zone: Optional[str] = None
    key_name: Optional[str] = None
    root_device_name: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state is InstanceState.RUNNING

    @property
    def security_group_label(self) -> str:
        return " ".join(self.security_groups)

    def table_row(self) -> List[Any]:
        return [
            self.instance_id,
            self.instance_type,
            self.image_id,
            self.state,
            self.public_ip,
            self.public_dns,
            self.security_group_label,
        ]

    @classmethod
    def from_aws_instance(cls, instance: Dict[str, Any]) -> "InstanceInfo":
        """Create InstanceInfo from AWS instance data."""
        return cls(
            instance_id=instance["InstanceId"],
            instance_type=instance.get("InstanceType", ""),
            image_id=instance.get("ImageId", ""),
            state=InstanceState(instance.get("State", {}).get("Name", "pending")),
            public_ip=instance.get("PublicIpAddress"),
            # the API reports an empty string until a name is assigned
            public_dns=instance.get("PublicDnsName") or None,
            security_groups=[
                group["GroupName"]
                for group in instance.get("SecurityGroups", [])
                if group.get("GroupName")
            ],
            availability_zone=instance.get("Placement", {}).get("AvailabilityZone"),
            key_name=instance.get("KeyName") or None,
            root_device_name=instance.get("RootDeviceName"),
        )
