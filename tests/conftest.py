"""Shared pytest fixtures for fleet-ops tests."""

import os
import tempfile
from unittest.mock import MagicMock

import pytest

# keep log files out of the working tree
os.environ.setdefault("FLEET_OPS_LOG_DIR", tempfile.mkdtemp(prefix="fleet-ops-logs-"))

from fleet_ops.core.aws.ec2 import EC2Manager  # noqa: E402
from fleet_ops.core.fleet import FleetManager  # noqa: E402
from fleet_ops.core.models import InstanceInfo, InstanceState  # noqa: E402
from fleet_ops.utils.config import Credentials  # noqa: E402

ACCOUNT_ID = "123456789012"


@pytest.fixture
def credentials():
    return Credentials(
        access_key_id="AKIATEST",
        secret_access_key="secret",
        default_key="default-key",
        default_security_group="default-sg",
        region="us-east-1",
    )


@pytest.fixture
def source_instance():
    return InstanceInfo(
        instance_id="i-1",
        instance_type="m5.large",
        image_id="ami-source",
        state=InstanceState.RUNNING,
        public_ip="203.0.113.10",
        public_dns="ec2-203-0-113-10.compute-1.amazonaws.com",
        security_groups=["web", "ssh"],
        availability_zone="us-east-1b",
        key_name="source-key",
        root_device_name="/dev/sda1",
    )


@pytest.fixture
def ec2(source_instance):
    """EC2Manager stand-in with an account id and a source instance."""
    mock_ec2 = MagicMock(spec=EC2Manager)
    mock_ec2.region = "us-east-1"
    mock_ec2.get_account_id.return_value = ACCOUNT_ID
    mock_ec2.describe_instance.return_value = source_instance
    mock_ec2.list_volumes.return_value = []
    mock_ec2.create_instances.return_value = []
    return mock_ec2


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def fleet(credentials, ec2, sleep):
    return FleetManager(credentials, ec2=ec2, sleep=sleep, parallel_waits=False)


@pytest.fixture
def write_config(tmp_path):
    """Factory writing an aws_config.yaml with sensible defaults."""

    def _write(name="aws_config.yaml", **overrides):
        path = tmp_path / name
        values = {
            "access_key_id": "AKIATEST",
            "secret_access_key": "secret",
            "default_key": "default-key",
            "default_security_group": "default-sg",
        }
        values.update(overrides)
        lines = [f"{key}: {value}" for key, value in values.items() if value is not None]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
