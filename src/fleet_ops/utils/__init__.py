from .config import ConfigManager, Credentials, load_credentials
from .session import SessionManager
from .logger import setup_logger
from .waiters import wait_until, wait_for_all
from .exceptions import (
    FleetError,
    ConfigMissing,
    ShapeMismatch,
    RemoteCallFailed,
    PollError,
    PollTimeout,
)

__all__ = [
    "ConfigManager",
    "Credentials",
    "load_credentials",
    "SessionManager",
    "setup_logger",
    "wait_until",
    "wait_for_all",
    "FleetError",
    "ConfigMissing",
    "ShapeMismatch",
    "RemoteCallFailed",
    "PollError",
    "PollTimeout",
]
