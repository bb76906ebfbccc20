"""Tier 2 fixtures: a reachable Thor node (testnet by default)."""

from __future__ import annotations

import httpx
import pytest

from thor_connex import Connex
from tests.conftest import LIVE_NODE_URL, make_test_config


@pytest.fixture(scope="session")
def node_available():
    """Check the node answers /blocks/best. Skip tier2 tests if not."""
    try:
        r = httpx.get(f"{LIVE_NODE_URL}/blocks/best", timeout=5)
        if r.status_code == 200 and r.json():
            return True
        pytest.skip(f"Thor node not available at {LIVE_NODE_URL}")
    except (httpx.HTTPError, ValueError):
        pytest.skip(f"Thor node not available at {LIVE_NODE_URL}")


@pytest.fixture
async def live_connex(node_available):
    """A started Connex against the live node, polling heads every second."""
    cfg = make_test_config(node_url=LIVE_NODE_URL, poll_interval=1.0, watch_backoff=1.0)
    async with Connex(cfg) as connex:
        yield connex
