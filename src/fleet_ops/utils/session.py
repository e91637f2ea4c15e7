#!/usr/bin/env python3
"""
utils/session.py

Session management utilities for AWS interactions.

Builds boto3 sessions from the configured static credentials.
"""

from typing import Optional

import boto3
from botocore.config import Config

from fleet_ops.utils.config import Credentials

API_MAX_ATTEMPTS = 3


def client_config(max_attempts: int = API_MAX_ATTEMPTS) -> Config:
    """botocore client config with bounded standard-mode retries."""
    return Config(retries={"max_attempts": max_attempts, "mode": "standard"})


class SessionManager:
    """Creates AWS sessions from configured credentials."""

    @classmethod
    def get_session(
        cls, credentials: Credentials, region: Optional[str] = None
    ) -> boto3.Session:
        """Create a boto3 Session for the given credentials and region."""
        return boto3.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            region_name=region or credentials.region,
        )
