"""Launch options for new EC2 instances.

Every instance-creating operation resolves its parameters the same way:
an explicit argument wins, then the source instance's value (when
duplicating), then the configured default.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from fleet_ops.core.models.instance import InstanceInfo
from fleet_ops.utils.config import Credentials

GroupsArg = Union[str, Sequence[str], None]


def _first(*candidates):
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def normalize_groups(groups: GroupsArg) -> List[str]:
    """Accept a single group, a space/comma separated string, or a list."""
    if not groups:
        return []
    if isinstance(groups, str):
        return [g for g in groups.replace(",", " ").split() if g]
    return [g for g in groups if g]


@dataclass
class LaunchOptions:
    """Resolved parameters for a single run_instances call."""
    image_id: str
    instance_type: str
    key_name: Optional[str] = None
    security_groups: List[str] = field(default_factory=list)
    availability_zone: Optional[str] = None
    count: int = 1
    # device path -> snapshot id to restore at launch
    block_device_mappings: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def resolve(
        cls,
        credentials: Credentials,
        source: Optional[InstanceInfo] = None,
        image_id: Optional[str] = None,
        instance_type: Optional[str] = None,
        key_name: Optional[str] = None,
        security_groups: GroupsArg = None,
        availability_zone: Optional[str] = None,
        count: int = 1,
    ) -> "LaunchOptions":
        """Apply the fallback chain: explicit -> source instance -> configuration."""
        source_groups = source.security_groups if source else None

        resolved_image = _first(image_id, source and source.image_id)
        resolved_type = _first(instance_type, source and source.instance_type)
        if not resolved_image:
            raise ValueError("An image id is required to launch an instance")
        if not resolved_type:
            raise ValueError("An instance type is required to launch an instance")

        return cls(
            image_id=resolved_image,
            instance_type=resolved_type,
            key_name=_first(key_name, source and source.key_name, credentials.default_key),
            security_groups=normalize_groups(
                _first(
                    normalize_groups(security_groups),
                    source_groups,
                    normalize_groups(credentials.default_security_group),
                )
            ),
            availability_zone=availability_zone,
            count=count,
        )

    def to_run_instances_params(self) -> Dict[str, Any]:
        """Build keyword arguments for ``ec2_client.run_instances``."""
        params: Dict[str, Any] = {
            "ImageId": self.image_id,
            "InstanceType": self.instance_type,
            "MinCount": self.count,
            "MaxCount": self.count,
        }
        if self.key_name:
            params["KeyName"] = self.key_name
        if self.security_groups:
            params["SecurityGroups"] = list(self.security_groups)
        if self.availability_zone:
            params["Placement"] = {"AvailabilityZone": self.availability_zone}
        if self.block_device_mappings:
            params["BlockDeviceMappings"] = [
                {"DeviceName": device, "Ebs": {"SnapshotId": snapshot_id}}
                for device, snapshot_id in self.block_device_mappings.items()
            ]
        return params
