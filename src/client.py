"""S3 client factory for the uptime analyzer.

Every call made through the client is bounded by connect/read timeouts and
retried with exponential backoff by botocore's standard retry mode. Only
transport and throttling failures are retried; decoding never goes
through here.
"""

from __future__ import annotations

import logging

import boto3
from botocore.config import Config

from core.config import RunConfig
from settings import StoreSettings


def build_client(run: RunConfig, store: StoreSettings):
    """Create a boto3 S3 client for the configured region.

    Credentials come from the default AWS chain (environment, shared config,
    instance role), loaded from .env by settings when present.
    """

    logging.getLogger(__name__).info("Initializing S3 client for region %s", run.region)

    config = Config(
        region_name=run.region,
        connect_timeout=store.connect_timeout,
        read_timeout=store.read_timeout,
        retries={"max_attempts": store.max_attempts, "mode": "standard"},
    )
    return boto3.client("s3", config=config)
