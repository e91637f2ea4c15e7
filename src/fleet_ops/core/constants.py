#!/usr/bin/env python3
"""Core constants for fleet operations."""

# AWS Service Constants
ROOT_DEVICE_NAME = "/dev/sda1"

# Polling intervals in seconds
SNAPSHOT_POLL_INTERVAL = 15
VOLUME_POLL_INTERVAL = 5

# Table headers
INSTANCE_HEADERS = [
    "Instance ID",
    "Type",
    "AMI ID",
    "Status",
    "IP Address",
    "Host",
    "Security Groups",
]
SNAPSHOT_HEADERS = ["Snapshot ID", "Description", "Size", "Status", "Progress"]
VOLUME_HEADERS = ["Device", "Volume ID", "Size", "Status", "Zone"]
