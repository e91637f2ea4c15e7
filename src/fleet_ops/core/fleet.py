#!/usr/bin/env python3
"""Fleet manager: instance, snapshot and volume operations on one account.

A FleetManager is built once (usually by the CLI or the interactive shell)
and passed to whatever needs it. All state lives in AWS; the only values held
here are the immutable credentials and the account id looked up at
construction.
"""

import time
from typing import Callable, Dict, List, Optional, TextIO

from fleet_ops.core.aws import EC2Manager, create_ec2_manager
from fleet_ops.core.constants import (
    INSTANCE_HEADERS,
    ROOT_DEVICE_NAME,
    SNAPSHOT_HEADERS,
    SNAPSHOT_POLL_INTERVAL,
    VOLUME_HEADERS,
    VOLUME_POLL_INTERVAL,
)
from fleet_ops.core.models import (
    InstanceInfo,
    LaunchOptions,
    SnapshotState,
    VolumeInfo,
    VolumeState,
)
from fleet_ops.core.table import render_table
from fleet_ops.utils.config import Credentials, load_credentials
from fleet_ops.utils.logger import setup_logger
from fleet_ops.utils.waiters import wait_for_all, wait_until

logger = setup_logger(__name__, "fleet.log")


class FleetManager:
    """Inspect and manipulate EC2 instances, snapshots and volumes."""

    def __init__(
        self,
        credentials: Credentials,
        ec2: Optional[EC2Manager] = None,
        ec2_factory: Callable[..., EC2Manager] = create_ec2_manager,
        sleep: Callable[[float], None] = time.sleep,
        parallel_waits: bool = True,
    ):
        """
        Args:
            credentials: Loaded configuration
            ec2: Pre-built EC2Manager (built from ``ec2_factory`` when omitted)
            ec2_factory: Builds an EC2Manager from credentials and a region
            sleep: Sleep function used between polls
            parallel_waits: Wait for several snapshots concurrently
        """
        self.credentials = credentials
        self._ec2_factory = ec2_factory
        self.ec2 = ec2 or ec2_factory(credentials)
        self.sleep = sleep
        self.parallel_waits = parallel_waits
        self.snapshot_poll_interval = SNAPSHOT_POLL_INTERVAL
        self.volume_poll_interval = VOLUME_POLL_INTERVAL

        self.account_id = self.ec2.get_account_id()

    @classmethod
    def from_config(
        cls, config_path: Optional[str] = None, region: Optional[str] = None
    ) -> "FleetManager":
        """Load credentials (failing fast if missing) and connect."""
        credentials = load_credentials(config_path)
        return cls(credentials, ec2=create_ec2_manager(credentials, region))

    @property
    def region(self) -> str:
        return self.ec2.region

    def switch_region(self, region: str) -> None:
        """Point subsequent calls at another region."""
        self.ec2 = self._ec2_factory(self.credentials, region)
        logger.info(f"Switched to region {region}")

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def list_regions(self) -> List[str]:
        return self.ec2.list_regions()

    def describe_instances(self, out: Optional[TextIO] = None) -> None:
        instances = self.ec2.list_instances()
        logger.debug(f"Fetched {len(instances)} instances in {self.region}")
        render_table(INSTANCE_HEADERS, [i.table_row() for i in instances], out)

    def describe_snapshots(self, out: Optional[TextIO] = None) -> None:
        snapshots = self.ec2.list_snapshots(self.account_id)
        logger.debug(f"Fetched {len(snapshots)} snapshots owned by {self.account_id}")
        render_table(SNAPSHOT_HEADERS, [s.table_row() for s in snapshots], out)

    def describe_volumes(self, instance_id: str, out: Optional[TextIO] = None) -> None:
        """Render the non-root volumes attached to an instance."""
        instance = self.ec2.describe_instance(instance_id)
        device_map = self.get_instance_volumes(instance_id, instance.root_device_name)
        rows = [
            [device, v.volume_id, f"{v.size}G", v.state, v.availability_zone]
            for device, v in sorted(device_map.items())
        ]
        render_table(VOLUME_HEADERS, rows, out)

    def get_instance_volumes(
        self, instance_id: str, root_device: Optional[str] = None
    ) -> Dict[str, VolumeInfo]:
        """Map device path to volume for every non-root volume on the instance.

        ``/dev/sda1`` is always treated as the root; pass the instance's own
        ``root_device_name`` to exclude it as well (e.g. ``/dev/xvda``).
        """
        excluded = {ROOT_DEVICE_NAME, root_device} - {None}
        device_map = {}
        for volume in self.ec2.list_volumes():
            for attachment in volume.attachments_for(instance_id):
                if attachment.device not in excluded:
                    device_map[attachment.device] = volume
        return device_map

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def start_instance(
        self,
        image_id: str,
        instance_type: str,
        key: Optional[str] = None,
        group: Optional[str] = None,
        count: int = 1,
    ) -> List[InstanceInfo]:
        options = LaunchOptions.resolve(
            self.credentials,
            image_id=image_id,
            instance_type=instance_type,
            key_name=key,
            security_groups=group,
            count=count,
        )
        return self.ec2.create_instances(options)

    def terminate_instance(self, instance_id: str) -> str:
        """Request termination without waiting for the terminated state."""
        return self.ec2.terminate_instance(instance_id)

    def duplicate_instance(
        self,
        instance_id: str,
        image_id: Optional[str] = None,
        instance_type: Optional[str] = None,
        count: int = 1,
    ) -> List[InstanceInfo]:
        """Launch copies of an instance's configuration. Volumes are not copied."""
        source = self.ec2.describe_instance(instance_id)
        options = LaunchOptions.resolve(
            self.credentials,
            source=source,
            image_id=image_id,
            instance_type=instance_type,
            count=count,
        )
        logger.info(f"Duplicating {instance_id} as {count} new instance(s)")
        return self.ec2.create_instances(options)

    # ------------------------------------------------------------------
    # Volume workflows
    # ------------------------------------------------------------------

    def duplicate_instance_with_volumes(
        self,
        instance_id: str,
        image_id: Optional[str] = None,
        count: int = 1,
        timeout: Optional[float] = None,
    ) -> List[InstanceInfo]:
        """
        Launch copies of an instance with every non-root volume restored.

        Each attached volume is snapshotted, the snapshots are awaited, and the
        new instances are launched in the source's availability zone with a
        block device mapping per snapshot.

        Snapshots already requested are left in place if a later step fails.

        Raises:
            PollError: A snapshot entered the error state
            PollTimeout: Snapshots were not completed within ``timeout`` seconds
            RemoteCallFailed: Any AWS call failed
        """
        source = self.ec2.describe_instance(instance_id)
        options = LaunchOptions.resolve(
            self.credentials,
            source=source,
            image_id=image_id,
            availability_zone=source.availability_zone,
            count=count,
        )

        device_map = self.get_instance_volumes(instance_id, source.root_device_name)
        snapshots = self._snapshot_devices(instance_id, device_map)
        self.wait_for_snapshots(list(snapshots.values()), timeout=timeout)

        options.block_device_mappings = snapshots
        logger.info(
            f"Launching {count} copies of {instance_id} with {len(snapshots)} restored volume(s)"
        )
        return self.ec2.create_instances(options)

    def _snapshot_devices(
        self, instance_id: str, device_map: Dict[str, VolumeInfo]
    ) -> Dict[str, str]:
        snapshots: Dict[str, str] = {}
        for device, volume in device_map.items():
            try:
                snapshots[device] = self.ec2.create_snapshot(
                    volume.volume_id,
                    f"Copy of {volume.volume_id} ({device}) on {instance_id}",
                )
            except Exception:
                if snapshots:
                    logger.warning(
                        f"Snapshot of {volume.volume_id} failed; already requested: "
                        f"{', '.join(snapshots.values())}"
                    )
                raise
        return snapshots

    def wait_for_snapshots(
        self, snapshot_ids: List[str], timeout: Optional[float] = None
    ) -> None:
        """Block until every snapshot is completed."""

        def waiter(snapshot_id):
            return lambda cancel: wait_until(
                lambda: self.ec2.get_snapshot_status(snapshot_id),
                snapshot_id,
                success=SnapshotState.COMPLETED.value,
                failures=[SnapshotState.ERROR.value],
                interval=self.snapshot_poll_interval,
                timeout=timeout,
                sleep=self.sleep,
                cancel=cancel,
            )

        if snapshot_ids:
            logger.info(f"Waiting for snapshots: {', '.join(snapshot_ids)}")
        wait_for_all([waiter(s) for s in snapshot_ids], parallel=self.parallel_waits)

    def attach_snapshot_instance(
        self,
        snapshot_id: str,
        instance_id: str,
        device: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Restore a snapshot to a new volume and attach it to an instance.

        Returns the new volume id.
        """
        instance = self.ec2.describe_instance(instance_id)
        volume_id = self.ec2.create_volume(snapshot_id, instance.availability_zone)

        wait_until(
            lambda: self.ec2.get_volume_status(volume_id),
            volume_id,
            success=VolumeState.AVAILABLE.value,
            failures=[VolumeState.ERROR.value],
            interval=self.volume_poll_interval,
            timeout=timeout,
            sleep=self.sleep,
        )

        self.ec2.attach_volume(volume_id, instance_id, device)
        return volume_id
