"""Configuration models."""

from __future__ import annotations

from dataclasses import dataclass

NETWORK_NODES = {
    "main": "https://mainnet.vechain.org",
    "test": "https://testnet.vechain.org",
}


@dataclass
class ConnexConfig:
    """Complete client configuration."""

    # Node
    network: str = "test"
    node_url: str = ""  # falls back to NETWORK_NODES[network]
    request_timeout: float = 15.0  # seconds
    poll_interval: float = 2.0  # seconds between head polls
    watch_backoff: float = 5.0  # seconds before re-subscribing after a watch error

    # Signer
    relay_url: str = ""
    wallet_url: str = ""  # shown to the user alongside the request id
    signer_poll_interval: float = 2.0
    signer_timeout: float = 600.0

    # Logging
    log_level: str = "info"

    @property
    def resolved_node_url(self) -> str:
        return self.node_url or NETWORK_NODES.get(self.network, "")
