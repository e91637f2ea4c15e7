"""Decorator patterns for fleet CLI commands."""

from functools import wraps
from typing import Callable

import click

from fleet_ops.utils.exceptions import FleetError
from fleet_ops.utils.logger import setup_logger

logger = setup_logger("fleet_ops.errors", "errors.log")


def handle_operation_error(operation_name: str, error: Exception) -> None:
    """Centralized error reporting for CLI operations.

    Args:
        operation_name: Name of the operation that failed
        error: Exception that occurred
    """
    error_msg = f"Error in {operation_name}: {str(error)}"
    click.echo(error_msg, err=True)
    logger.error(
        error_msg,
        extra={"operation": operation_name, "error_type": type(error).__name__},
    )


def fleet_operation(requires_confirmation: bool = False):
    """Wrap a click command so it receives a connected FleetManager.

    The wrapped function is called as ``func(ctx, fleet, **kwargs)``. Fleet
    errors are reported on stderr and turned into exit code 1.

    Args:
        requires_confirmation: Ask before running unless ``--force`` was given
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ctx, **kwargs):
            operation_name = func.__name__.replace("_", "-")

            if requires_confirmation and not kwargs.get("force", False):
                if not click.confirm(f"Continue with {operation_name}?"):
                    click.echo("Operation cancelled by user.")
                    return None

            try:
                fleet = ctx.obj["get_fleet"]()
                return func(ctx, fleet, **kwargs)
            except FleetError as e:
                handle_operation_error(operation_name, e)
                ctx.exit(1)

        return wrapper

    return decorator
