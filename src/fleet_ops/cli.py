#!/usr/bin/env python3
"""
Fleet Ops - CLI
Inspect and manipulate EC2 instances, snapshots and volumes
"""

import code
import logging

import click

from fleet_ops import __version__
from fleet_ops.core.constants import INSTANCE_HEADERS
from fleet_ops.core.fleet import FleetManager
from fleet_ops.core.table import render_table
from fleet_ops.utils.config import ConfigManager
from fleet_ops.utils.decorators import fleet_operation
from fleet_ops.utils.logger import set_level


def setup_logging(level: str = "INFO") -> None:
    """Apply ``level`` to every fleet_ops logger."""
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("fleet_ops"):
            set_level(logging.getLogger(name), level)


def echo_instances(instances):
    render_table(INSTANCE_HEADERS, [i.table_row() for i in instances])


# Common CLI options
def add_timeout_option(func):
    return click.option(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for snapshots/volumes before giving up (default: wait forever)",
    )(func)


def add_force_option(func):
    return click.option("--force", is_flag=True, help="Skip confirmation prompts")(func)


@click.group()
@click.option("--config", "config_path", type=click.Path(), help="Path to aws_config.yaml")
@click.option("--region", default=None, help="AWS region (defaults to the configured region)")
@click.option("--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, config_path, region, verbose):
    """Fleet Ops - EC2 instance, snapshot and volume helper"""
    ctx.ensure_object(dict)
    setup_logging("DEBUG" if verbose else "INFO")

    def get_fleet():
        if "fleet" not in ctx.obj:
            if not verbose:
                setup_logging(ConfigManager(config_path).get_logging_level())
            ctx.obj["fleet"] = FleetManager.from_config(config_path, region)
        return ctx.obj["fleet"]

    ctx.obj.setdefault("get_fleet", get_fleet)


@cli.command()
@click.pass_context
@fleet_operation()
def regions(ctx, fleet):
    """List region names"""
    for name in fleet.list_regions():
        click.echo(name)


@cli.command()
@click.pass_context
@fleet_operation()
def instances(ctx, fleet):
    """Describe all instances"""
    fleet.describe_instances()


@cli.command()
@click.pass_context
@fleet_operation()
def snapshots(ctx, fleet):
    """Describe snapshots owned by this account"""
    fleet.describe_snapshots()


@cli.command()
@click.argument("instance_id")
@click.pass_context
@fleet_operation()
def volumes(ctx, fleet, instance_id):
    """Describe the non-root volumes attached to INSTANCE_ID"""
    fleet.describe_volumes(instance_id)


@cli.command()
@click.argument("image_id")
@click.argument("instance_type")
@click.option("--key", default=None, help="Key pair name (defaults to default_key)")
@click.option(
    "--group", default=None, help="Security group (defaults to default_security_group)"
)
@click.option("--count", type=int, default=1, show_default=True, help="Number of instances")
@click.pass_context
@fleet_operation()
def start(ctx, fleet, image_id, instance_type, key, group, count):
    """Launch instances from IMAGE_ID as INSTANCE_TYPE"""
    echo_instances(fleet.start_instance(image_id, instance_type, key, group, count))


@cli.command()
@click.argument("instance_id")
@add_force_option
@click.pass_context
@fleet_operation(requires_confirmation=True)
def terminate(ctx, fleet, instance_id, force):
    """Terminate INSTANCE_ID (does not wait)"""
    state = fleet.terminate_instance(instance_id)
    click.echo(f"{instance_id}: {state or 'terminating'}")


@cli.command()
@click.argument("instance_id")
@click.option("--image-id", default=None, help="Override the source image")
@click.option("--instance-type", default=None, help="Override the source instance type")
@click.option("--count", type=int, default=1, show_default=True, help="Number of copies")
@click.pass_context
@fleet_operation()
def duplicate(ctx, fleet, instance_id, image_id, instance_type, count):
    """Launch copies of INSTANCE_ID without its volumes"""
    echo_instances(fleet.duplicate_instance(instance_id, image_id, instance_type, count))


@cli.command("duplicate-with-volumes")
@click.argument("instance_id")
@click.option("--image-id", default=None, help="Override the source image")
@click.option("--count", type=int, default=1, show_default=True, help="Number of copies")
@add_timeout_option
@click.pass_context
@fleet_operation()
def duplicate_with_volumes(ctx, fleet, instance_id, image_id, count, timeout):
    """Snapshot INSTANCE_ID's volumes and launch copies with them restored"""
    echo_instances(
        fleet.duplicate_instance_with_volumes(instance_id, image_id, count, timeout=timeout)
    )


@cli.command("attach-snapshot")
@click.argument("snapshot_id")
@click.argument("instance_id")
@click.argument("device")
@add_timeout_option
@click.pass_context
@fleet_operation()
def attach_snapshot(ctx, fleet, snapshot_id, instance_id, device, timeout):
    """Restore SNAPSHOT_ID to a new volume attached to INSTANCE_ID at DEVICE"""
    volume_id = fleet.attach_snapshot_instance(snapshot_id, instance_id, device, timeout=timeout)
    click.echo(f"Attached {volume_id} to {instance_id} at {device}")


@cli.command()
@click.pass_context
@fleet_operation()
def shell(ctx, fleet):
    """Open a Python console with `fleet` bound to a FleetManager"""
    banner = (
        f"Fleet Ops {__version__} ({fleet.region}, account {fleet.account_id})\n"
        "`fleet` is a connected FleetManager, e.g. fleet.describe_instances()"
    )
    code.interact(banner=banner, local={"fleet": fleet})


@cli.command()
def version():
    """Show version information"""
    click.echo(f"Fleet Ops {__version__}")
    click.echo("EC2 instance, snapshot and volume helper")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
