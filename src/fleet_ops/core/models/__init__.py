"""Simple data models for EC2 resources."""

# Instance models
from .instance import (
    InstanceState,
    InstanceInfo,
)

# Volume models
from .volume import (
    VolumeState,
    Attachment,
    VolumeInfo,
)

# Snapshot models
from .snapshot import (
    SnapshotState,
    SnapshotInfo,
)

# Launch models
from .launch import (
    LaunchOptions,
    normalize_groups,
)

__all__ = [
    # Instance models
    "InstanceState",
    "InstanceInfo",
    # Volume models
    "VolumeState",
    "Attachment",
    "VolumeInfo",
    # Snapshot models
    "SnapshotState",
    "SnapshotInfo",
    # Launch models
    "LaunchOptions",
    "normalize_groups",
]
