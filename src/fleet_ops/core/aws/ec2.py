"""EC2 Manager wrapping the boto3 EC2 and STS clients."""

from functools import wraps
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fleet_ops.core.models import InstanceInfo, LaunchOptions, SnapshotInfo, VolumeInfo
from fleet_ops.utils.config import Credentials
from fleet_ops.utils.exceptions import RemoteCallFailed
from fleet_ops.utils.logger import setup_logger
from fleet_ops.utils.session import SessionManager, client_config

logger = setup_logger(__name__, "ec2_manager.log")


def remote_call(operation: str) -> Callable:
    """Translate botocore failures into RemoteCallFailed for ``operation``."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                error = e.response.get("Error", {})
                logger.error(f"Error in {operation}: {e}")
                raise RemoteCallFailed(
                    operation, error.get("Message", str(e)), error.get("Code")
                ) from e
            except BotoCoreError as e:
                logger.error(f"Error in {operation}: {e}")
                raise RemoteCallFailed(operation, str(e)) from e

        return wrapper

    return decorator


class EC2Manager:
    """AWS EC2 resource manager exposing the calls fleet operations need."""

    def __init__(self, session: boto3.Session, region: str):
        """Initialize EC2Manager."""
        self.session = session
        self.region = region
        self.ec2_client = session.client("ec2", region_name=region, config=client_config())
        self.sts_client = session.client("sts", region_name=region, config=client_config())

    def _paginate(self, method: str, key: str, **params) -> List[Dict[str, Any]]:
        paginator = self.ec2_client.get_paginator(method)
        items = []
        for page in paginator.paginate(**params):
            items.extend(page.get(key, []))
        return items

    @remote_call("describe_regions")
    def list_regions(self) -> List[str]:
        response = self.ec2_client.describe_regions()
        return [region["RegionName"] for region in response["Regions"]]

    @remote_call("describe_instances")
    def list_instances(self, instance_ids: Optional[List[str]] = None) -> List[InstanceInfo]:
        """Describe instances in one batched, paginated query."""
        params = {}
        if instance_ids:
            params["InstanceIds"] = instance_ids

        instances = []
        for reservation in self._paginate("describe_instances", "Reservations", **params):
            for instance in reservation["Instances"]:
                instances.append(InstanceInfo.from_aws_instance(instance))
        return instances

    def describe_instance(self, instance_id: str) -> InstanceInfo:
        instances = self.list_instances([instance_id])
        if not instances:
            raise RemoteCallFailed(
                "describe_instances",
                f"Instance {instance_id} not found",
                "InvalidInstanceID.NotFound",
            )
        return instances[0]

    @remote_call("run_instances")
    def create_instances(self, options: LaunchOptions) -> List[InstanceInfo]:
        params = options.to_run_instances_params()
        logger.info(
            f"Launching {options.count} x {options.instance_type} from {options.image_id}"
        )
        response = self.ec2_client.run_instances(**params)
        instances = [InstanceInfo.from_aws_instance(i) for i in response["Instances"]]
        logger.info(f"Launched instances: {[i.instance_id for i in instances]}")
        return instances

    @remote_call("terminate_instances")
    def terminate_instance(self, instance_id: str) -> str:
        """Request termination and return the reported current state."""
        response = self.ec2_client.terminate_instances(InstanceIds=[instance_id])
        logger.info(f"Terminating instance: {instance_id}")
        for change in response.get("TerminatingInstances", []):
            if change.get("InstanceId") == instance_id:
                return change["CurrentState"]["Name"]
        return ""

    @remote_call("describe_volumes")
    def list_volumes(self) -> List[VolumeInfo]:
        return [
            VolumeInfo.from_aws_volume(v)
            for v in self._paginate("describe_volumes", "Volumes")
        ]

    @remote_call("create_volume")
    def create_volume(self, snapshot_id: str, availability_zone: str) -> str:
        response = self.ec2_client.create_volume(
            SnapshotId=snapshot_id, AvailabilityZone=availability_zone
        )
        volume_id = response["VolumeId"]
        logger.info(f"Creating volume {volume_id} from {snapshot_id} in {availability_zone}")
        return volume_id

    @remote_call("attach_volume")
    def attach_volume(self, volume_id: str, instance_id: str, device: str) -> str:
        response = self.ec2_client.attach_volume(
            VolumeId=volume_id, InstanceId=instance_id, Device=device
        )
        logger.info(f"Attaching {volume_id} to {instance_id} at {device}")
        return response.get("State", "")

    @remote_call("create_snapshot")
    def create_snapshot(self, volume_id: str, description: str = "") -> str:
        response = self.ec2_client.create_snapshot(
            VolumeId=volume_id, Description=description
        )
        snapshot_id = response["SnapshotId"]
        logger.info(f"Creating snapshot {snapshot_id} of {volume_id}")
        return snapshot_id

    @remote_call("describe_snapshots")
    def list_snapshots(self, owner_id: str) -> List[SnapshotInfo]:
        return [
            SnapshotInfo.from_aws_snapshot(s)
            for s in self._paginate("describe_snapshots", "Snapshots", OwnerIds=[owner_id])
        ]

    @remote_call("describe_snapshots")
    def get_snapshot_status(self, snapshot_id: str) -> str:
        response = self.ec2_client.describe_snapshots(SnapshotIds=[snapshot_id])
        return response["Snapshots"][0]["State"]

    @remote_call("describe_volumes")
    def get_volume_status(self, volume_id: str) -> str:
        response = self.ec2_client.describe_volumes(VolumeIds=[volume_id])
        return response["Volumes"][0]["State"]

    @remote_call("get_caller_identity")
    def get_account_id(self) -> str:
        return self.sts_client.get_caller_identity()["Account"]


def create_ec2_manager(credentials: Credentials, region: Optional[str] = None) -> EC2Manager:
    """Create EC2Manager for the configured credentials and region."""
    region = region or credentials.region
    session = SessionManager.get_session(credentials, region)
    return EC2Manager(session, region)
