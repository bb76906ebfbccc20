"""Shared fixtures for thor_connex tests."""

from __future__ import annotations

import os

import pytest
from pytest_metadata.plugin import metadata_key

from thor_connex.abi.codec import EthAbiCodec
from thor_connex.models.config import ConnexConfig
from thor_connex.thor.facade import Thor
from thor_connex.thor.ticker import HeadWatcher
from thor_connex.vendor.facade import Vendor

from tests.factories import make_block, make_head
from tests.mocks import MockAuthority, MockGateway

LIVE_NODE_URL = os.environ.get("THOR_CONNEX_NODE_URL", "https://testnet.vechain.org")


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add node info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Thor Node"] = LIVE_NODE_URL


def make_test_config(**overrides) -> ConnexConfig:
    """Build a ConnexConfig suitable for testing."""
    defaults = dict(
        network="test",
        node_url="http://127.0.0.1:8669",
        request_timeout=5.0,
        poll_interval=0.01,
        watch_backoff=0.01,
        relay_url="",
        signer_poll_interval=0.01,
        signer_timeout=1.0,
    )
    defaults.update(overrides)
    return ConnexConfig(**defaults)


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
def codec():
    return EthAbiCodec()


@pytest.fixture
def mock_gateway():
    """In-memory chain at height 100."""
    return MockGateway(head_number=100)


@pytest.fixture
def mock_authority():
    return MockAuthority()


@pytest.fixture
async def watcher(mock_gateway):
    """HeadWatcher whose baseline is the mock chain's head."""
    w = HeadWatcher(mock_gateway, backoff=0.01)
    w.observe(make_head(mock_gateway.head_number))
    yield w
    await w.stop()


@pytest.fixture
def thor(mock_gateway, codec, watcher):
    """Thor facade wired to mocks."""
    return Thor(mock_gateway, codec, make_block(0), watcher)


@pytest.fixture
def vendor(mock_authority):
    return Vendor(mock_authority)
