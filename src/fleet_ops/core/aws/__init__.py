"""AWS core modules."""

from .ec2 import EC2Manager, create_ec2_manager, remote_call

__all__ = [
    "EC2Manager",
    "create_ec2_manager",
    "remote_call",
]
