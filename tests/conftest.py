"""Shared fixtures for the OBS client tests.

HTTP traffic is simulated with ``httpx.MockTransport``; no test needs
network access or real credentials.
"""

from datetime import datetime, timezone

import httpx
import pytest

from obscli.client import ObsClient
from obscli.models import Credentials, ObsConfig

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
FIXED_DATE = "Tue, 02 Jan 2024 03:04:05 GMT"


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_key="test-ak", secret_key="test-sk")


@pytest.fixture
def config() -> ObsConfig:
    return ObsConfig(region="la-south-2")


@pytest.fixture
def make_client(credentials, config):
    """Build an ObsClient whose requests are answered by ``handler``."""

    def _make(handler, config: ObsConfig = config) -> ObsClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ObsClient(http_client, credentials, config, clock=lambda: FIXED_TIME)

    return _make
