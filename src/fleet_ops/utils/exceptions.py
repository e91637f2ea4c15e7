"""Exception classes for fleet operations.

Every error raised by this package derives from ``FleetError`` so callers in
an interactive session or the CLI can catch them in one place.
"""

from typing import Optional


class FleetError(Exception):
    """Base class for fleet-ops errors."""

    pass


class ConfigMissing(FleetError):
    """Credential configuration file is absent, unreadable or incomplete."""

    pass


class ShapeMismatch(FleetError, ValueError):
    """Table header and row lengths differ."""

    def __init__(self, expected: int, actual: int, row_index: int):
        self.expected = expected
        self.actual = actual
        self.row_index = row_index
        super().__init__(
            f"Table header and value count does not match: "
            f"row {row_index} has {actual} values, header has {expected}"
        )


class RemoteCallFailed(FleetError):
    """A provider API call failed."""

    def __init__(self, operation: str, message: str, code: Optional[str] = None):
        self.operation = operation
        self.code = code
        detail = f"{code}: {message}" if code else message
        super().__init__(f"{operation} failed: {detail}")


class PollError(FleetError):
    """A polled resource reached a failure state."""

    def __init__(self, resource_id: str, status: str):
        self.resource_id = resource_id
        self.status = status
        super().__init__(f"{resource_id} entered '{status}' state")


class PollTimeout(FleetError):
    """A polled resource did not become ready in time."""

    def __init__(self, resource_id: str, timeout: float, last_status: Optional[str] = None):
        self.resource_id = resource_id
        self.timeout = timeout
        self.last_status = last_status
        super().__init__(
            f"Timed out after {timeout}s waiting for {resource_id} "
            f"(last status: {last_status or 'unknown'})"
        )
