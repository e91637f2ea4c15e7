"""Tests for fleet_ops/core/fleet.py."""

import io
from unittest.mock import MagicMock, call

import pytest

from fleet_ops.core.fleet import FleetManager
from fleet_ops.core.models import (
    Attachment,
    InstanceInfo,
    InstanceState,
    SnapshotInfo,
    SnapshotState,
    VolumeInfo,
    VolumeState,
)
from fleet_ops.utils.exceptions import ConfigMissing, PollError, PollTimeout, RemoteCallFailed

ACCOUNT_ID = "123456789012"


def volume(volume_id, device, instance_id="i-1", size=8):
    return VolumeInfo(
        volume_id=volume_id,
        size=size,
        state=VolumeState.IN_USE,
        availability_zone="us-east-1b",
        attachments=[Attachment(device=device, instance_id=instance_id)],
    )


def launched_options(ec2):
    return ec2.create_instances.call_args.args[0]


def test_account_id_is_looked_up_once(fleet, ec2):
    fleet.describe_snapshots(io.StringIO())
    fleet.describe_snapshots(io.StringIO())

    assert fleet.account_id == ACCOUNT_ID
    ec2.get_account_id.assert_called_once()


def test_list_regions(fleet, ec2):
    ec2.list_regions.return_value = ["us-east-1", "ap-southeast-2"]

    assert fleet.list_regions() == ["us-east-1", "ap-southeast-2"]


def test_describe_instances_renders_batched_query(fleet, ec2, source_instance):
    ec2.list_instances.return_value = [source_instance]
    out = io.StringIO()

    fleet.describe_instances(out)

    ec2.list_instances.assert_called_once_with()
    header, divider, row = out.getvalue().splitlines()
    assert header.startswith("Instance ID | Type     | AMI ID     | Status ")
    assert len(divider) == len(header)
    assert row.split(" | ")[0] == "i-1".ljust(len("Instance ID"))
    assert row.rstrip().endswith("web ssh")
    assert "running" in row


def test_describe_snapshots_uses_owner_and_size_label(fleet, ec2):
    ec2.list_snapshots.return_value = [
        SnapshotInfo("snap-1", 8, SnapshotState.PENDING, "nightly", "42%")
    ]
    out = io.StringIO()

    fleet.describe_snapshots(out)

    ec2.list_snapshots.assert_called_once_with(ACCOUNT_ID)
    lines = out.getvalue().splitlines()
    assert lines[0].split(" | ")[:3] == ["Snapshot ID", "Description", "Size"]
    assert [cell.strip() for cell in lines[2].split(" | ")] == [
        "snap-1", "nightly", "8G", "pending", "42%"
    ]


def test_get_instance_volumes_excludes_root_device(fleet, ec2):
    v1 = volume("v1", "/dev/sda1")
    v2 = volume("v2", "/dev/sdf")
    ec2.list_volumes.return_value = [v1, v2]

    assert fleet.get_instance_volumes("i-1") == {"/dev/sdf": v2}
    ec2.list_volumes.assert_called_once_with()


def test_get_instance_volumes_excludes_instance_root_device(fleet, ec2):
    ec2.list_volumes.return_value = [volume("v1", "/dev/xvda"), volume("v2", "/dev/sdf")]

    assert list(fleet.get_instance_volumes("i-1", "/dev/xvda")) == ["/dev/sdf"]
    assert list(fleet.get_instance_volumes("i-1")) == ["/dev/xvda", "/dev/sdf"]


def test_duplicate_with_volumes_skips_xvda_root(fleet, ec2, source_instance):
    source_instance.root_device_name = "/dev/xvda"
    ec2.list_volumes.return_value = [volume("v1", "/dev/xvda"), volume("v2", "/dev/sdf")]
    ec2.create_snapshot.return_value = "snap-2"
    ec2.get_snapshot_status.return_value = "completed"

    fleet.duplicate_instance_with_volumes("i-1")

    ec2.create_snapshot.assert_called_once()
    assert launched_options(ec2).block_device_mappings == {"/dev/sdf": "snap-2"}


def test_get_instance_volumes_ignores_other_instances(fleet, ec2):
    ec2.list_volumes.return_value = [
        volume("v1", "/dev/sdf", instance_id="i-2"),
        VolumeInfo("v3", 1, VolumeState.AVAILABLE),
    ]

    assert fleet.get_instance_volumes("i-1") == {}


def test_describe_volumes_renders_device_map(fleet, ec2):
    ec2.list_volumes.return_value = [volume("v2", "/dev/sdg", size=20), volume("v1", "/dev/sdf")]
    out = io.StringIO()

    fleet.describe_volumes("i-1", out)

    rows = out.getvalue().splitlines()[2:]
    assert [r.split(" | ")[0].strip() for r in rows] == ["/dev/sdf", "/dev/sdg"]
    assert "20G" in rows[1]


def test_start_instance_defaults_key_and_group(fleet, ec2):
    fleet.start_instance("ami-1", "t2.micro", count=3)

    options = launched_options(ec2)
    assert options.image_id == "ami-1"
    assert options.instance_type == "t2.micro"
    assert options.key_name == "default-key"
    assert options.security_groups == ["default-sg"]
    assert options.count == 3
    ec2.create_instances.assert_called_once()


def test_start_instance_explicit_key_and_group(fleet, ec2):
    fleet.start_instance("ami-1", "t2.micro", key="mine", group="web")

    options = launched_options(ec2)
    assert options.key_name == "mine"
    assert options.security_groups == ["web"]


def test_terminate_instance_does_not_wait(fleet, ec2, sleep):
    ec2.terminate_instance.return_value = "shutting-down"

    assert fleet.terminate_instance("i-1") == "shutting-down"
    ec2.terminate_instance.assert_called_once_with("i-1")
    sleep.assert_not_called()


def test_duplicate_instance_reproduces_source(fleet, ec2):
    new = [InstanceInfo("i-9", "m5.large", "ami-source", InstanceState.PENDING)]
    ec2.create_instances.return_value = new

    assert fleet.duplicate_instance("i-1") == new

    options = launched_options(ec2)
    assert options.image_id == "ami-source"
    assert options.instance_type == "m5.large"
    assert options.key_name == "source-key"
    assert options.security_groups == ["web", "ssh"]
    assert options.block_device_mappings == {}
    ec2.list_volumes.assert_not_called()


def test_duplicate_instance_falls_back_to_default_key(fleet, ec2, source_instance):
    source_instance.key_name = None

    fleet.duplicate_instance("i-1", instance_type="c5.large", count=2)

    options = launched_options(ec2)
    assert options.key_name == "default-key"
    assert options.instance_type == "c5.large"
    assert options.count == 2


def test_duplicate_with_volumes_restores_snapshots(fleet, ec2, sleep):
    ec2.list_volumes.return_value = [volume("v1", "/dev/sda1"), volume("v2", "/dev/sdf")]
    ec2.create_snapshot.return_value = "snap-2"
    ec2.get_snapshot_status.side_effect = ["pending", "completed"]

    fleet.duplicate_instance_with_volumes("i-1", count=2)

    ec2.create_snapshot.assert_called_once()
    assert ec2.create_snapshot.call_args.args[0] == "v2"
    assert sleep.call_args_list == [call(15)]
    options = launched_options(ec2)
    assert options.block_device_mappings == {"/dev/sdf": "snap-2"}
    assert options.availability_zone == "us-east-1b"
    assert options.image_id == "ami-source"
    assert options.count == 2
    assert options.to_run_instances_params()["BlockDeviceMappings"] == [
        {"DeviceName": "/dev/sdf", "Ebs": {"SnapshotId": "snap-2"}}
    ]


def test_duplicate_with_volumes_without_volumes_skips_mappings(fleet, ec2, sleep):
    fleet.duplicate_instance_with_volumes("i-1", image_id="ami-new")

    options = launched_options(ec2)
    assert options.image_id == "ami-new"
    assert "BlockDeviceMappings" not in options.to_run_instances_params()
    ec2.create_snapshot.assert_not_called()
    sleep.assert_not_called()


def test_duplicate_with_volumes_aborts_on_snapshot_error(fleet, ec2, sleep):
    ec2.list_volumes.return_value = [volume("v2", "/dev/sdf")]
    ec2.create_snapshot.return_value = "snap-2"
    ec2.get_snapshot_status.return_value = "error"

    with pytest.raises(PollError) as exc_info:
        fleet.duplicate_instance_with_volumes("i-1")

    assert exc_info.value.resource_id == "snap-2"
    ec2.get_snapshot_status.assert_called_once_with("snap-2")
    ec2.create_instances.assert_not_called()


def test_duplicate_with_volumes_times_out(fleet, ec2, sleep):
    ec2.list_volumes.return_value = [volume("v2", "/dev/sdf")]
    ec2.create_snapshot.return_value = "snap-2"
    ec2.get_snapshot_status.return_value = "pending"

    with pytest.raises(PollTimeout):
        fleet.duplicate_instance_with_volumes("i-1", timeout=0)

    ec2.create_instances.assert_not_called()


def test_duplicate_with_volumes_partial_snapshot_failure_propagates(fleet, ec2):
    ec2.list_volumes.return_value = [volume("v2", "/dev/sdf"), volume("v3", "/dev/sdg")]
    ec2.create_snapshot.side_effect = [
        "snap-2",
        RemoteCallFailed("create_snapshot", "limit exceeded", "SnapshotLimitExceeded"),
    ]

    with pytest.raises(RemoteCallFailed):
        fleet.duplicate_instance_with_volumes("i-1")

    assert ec2.create_snapshot.call_count == 2
    ec2.get_snapshot_status.assert_not_called()
    ec2.create_instances.assert_not_called()


def test_parallel_snapshot_waits(credentials, ec2, sleep):
    fleet = FleetManager(credentials, ec2=ec2, sleep=sleep, parallel_waits=True)
    ec2.list_volumes.return_value = [volume("v2", "/dev/sdf"), volume("v3", "/dev/sdg")]
    ec2.create_snapshot.side_effect = ["snap-2", "snap-3"]
    ec2.get_snapshot_status.return_value = "completed"

    fleet.duplicate_instance_with_volumes("i-1")

    assert sorted(c.args[0] for c in ec2.get_snapshot_status.call_args_list) == ["snap-2", "snap-3"]
    assert launched_options(ec2).block_device_mappings == {"/dev/sdf": "snap-2", "/dev/sdg": "snap-3"}


def test_attach_snapshot_instance(fleet, ec2, sleep):
    ec2.create_volume.return_value = "vol-new"
    ec2.get_volume_status.side_effect = ["creating", "available"]

    assert fleet.attach_snapshot_instance("snap-1", "i-1", "/dev/sdh") == "vol-new"

    ec2.create_volume.assert_called_once_with("snap-1", "us-east-1b")
    assert sleep.call_args_list == [call(5)]
    ec2.attach_volume.assert_called_once_with("vol-new", "i-1", "/dev/sdh")


def test_attach_snapshot_instance_volume_error(fleet, ec2):
    ec2.create_volume.return_value = "vol-new"
    ec2.get_volume_status.return_value = "error"

    with pytest.raises(PollError):
        fleet.attach_snapshot_instance("snap-1", "i-1", "/dev/sdh")

    ec2.attach_volume.assert_not_called()


def test_switch_region_rebuilds_client(credentials, ec2):
    other = MagicMock()
    other.region = "eu-west-1"
    factory = MagicMock(return_value=other)
    fleet = FleetManager(credentials, ec2=ec2, ec2_factory=factory)

    fleet.switch_region("eu-west-1")

    factory.assert_called_once_with(credentials, "eu-west-1")
    assert fleet.region == "eu-west-1"
    assert fleet.account_id == ACCOUNT_ID


def test_from_config_fails_before_any_remote_call(tmp_path, monkeypatch):
    factory = MagicMock()
    monkeypatch.setattr("fleet_ops.core.fleet.create_ec2_manager", factory)

    with pytest.raises(ConfigMissing):
        FleetManager.from_config(str(tmp_path / "absent.yaml"))

    factory.assert_not_called()
