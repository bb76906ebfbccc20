"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from thor_connex.models.config import ConnexConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "THOR_CONNEX_",
) -> ConnexConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (THOR_CONNEX_NODE_URL, etc.)
        2. TOML config file
        3. Defaults from ConnexConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ConnexConfig()

    # ── Node section ───────────────────────────────────────
    node = raw.get("node", {})
    if v := node.get("network"):
        cfg.network = str(v)
    if v := node.get("url"):
        cfg.node_url = str(v)
    if v := node.get("request_timeout"):
        cfg.request_timeout = float(v)
    if v := node.get("poll_interval"):
        cfg.poll_interval = float(v)
    if v := node.get("watch_backoff"):
        cfg.watch_backoff = float(v)

    # ── Signer section ─────────────────────────────────────
    signer = raw.get("signer", {})
    if v := signer.get("relay_url"):
        cfg.relay_url = str(v)
    if v := signer.get("wallet_url"):
        cfg.wallet_url = str(v)
    if v := signer.get("poll_interval"):
        cfg.signer_poll_interval = float(v)
    if v := signer.get("timeout"):
        cfg.signer_timeout = float(v)

    # ── Logging section ────────────────────────────────────
    logging_section = raw.get("logging", {})
    if v := logging_section.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if url := os.environ.get(f"{env_prefix}NODE_URL"):
        cfg.node_url = url
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if relay := os.environ.get(f"{env_prefix}SIGNER_RELAY_URL"):
        cfg.relay_url = relay
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    return cfg
