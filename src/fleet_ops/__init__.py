"""Fleet Ops - interactive helper for EC2 instances, snapshots and volumes."""

__version__ = "1.0.0"
