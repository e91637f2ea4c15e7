"""Core fleet operations."""

from .aws import EC2Manager, create_ec2_manager
from .models import (
    InstanceInfo,
    VolumeInfo,
    Attachment,
    SnapshotInfo,
    LaunchOptions,
    InstanceState,
    VolumeState,
    SnapshotState,
)
from .table import format_table, render_table
from .fleet import FleetManager

__all__ = [
    # AWS Managers
    "EC2Manager",
    "create_ec2_manager",
    "FleetManager",
    # Models
    "InstanceInfo",
    "VolumeInfo",
    "Attachment",
    "SnapshotInfo",
    "LaunchOptions",
    # Enums
    "InstanceState",
    "VolumeState",
    "SnapshotState",
    # Tables
    "format_table",
    "render_table",
]
