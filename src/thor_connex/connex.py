"""Connex - wires the gateway, codec, head watcher and signer together."""

from __future__ import annotations

import logging

from thor_connex.abi.codec import EthAbiCodec
from thor_connex.errors import InvalidState, TransportFailure
from thor_connex.interfaces.authority import SigningAuthority
from thor_connex.interfaces.codec import AbiCodec
from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.config import ConnexConfig
from thor_connex.revision import resolve_revision
from thor_connex.thor.facade import Thor
from thor_connex.thor.gateway import HttpNodeGateway
from thor_connex.thor.ticker import HeadWatcher
from thor_connex.vendor.facade import Vendor
from thor_connex.vendor.relay import RelaySigningAuthority

log = logging.getLogger(__name__)


class Connex:
    """Entry point holding one Thor and one Vendor.

    Use as an async context manager, or call start() and close() yourself.
    Collaborators can be injected; by default they are built from the config.
    """

    def __init__(
        self,
        cfg: ConnexConfig | None = None,
        gateway: NodeGateway | None = None,
        codec: AbiCodec | None = None,
        authority: SigningAuthority | None = None,
    ) -> None:
        self._cfg = cfg or ConnexConfig()
        if gateway is None:
            gateway = HttpNodeGateway(
                self._cfg.resolved_node_url,
                request_timeout=self._cfg.request_timeout,
                poll_interval=self._cfg.poll_interval,
            )
        if authority is None and self._cfg.relay_url:
            authority = RelaySigningAuthority(
                self._cfg.relay_url,
                wallet_url=self._cfg.wallet_url,
                poll_interval=self._cfg.signer_poll_interval,
                timeout=self._cfg.signer_timeout,
                request_timeout=self._cfg.request_timeout,
            )
        self.gateway = gateway
        self.codec = codec or EthAbiCodec()
        self.authority = authority
        self.watcher = HeadWatcher(gateway, backoff=self._cfg.watch_backoff)
        self.vendor = Vendor(authority)
        self._thor: Thor | None = None

    @property
    def thor(self) -> Thor:
        if self._thor is None:
            raise InvalidState("Connex not started; call start() first")
        return self._thor

    async def start(self) -> None:
        """Load the genesis block and current head, then start watching."""
        genesis = await self.gateway.get_block(resolve_revision(0))
        if genesis is None:
            raise TransportFailure("node returned no genesis block")
        head = await self.gateway.get_status()
        self.watcher.observe(head)
        self.watcher.start()
        self._thor = Thor(self.gateway, self.codec, genesis, self.watcher)
        log.info("Connected: genesis %s, head #%d", genesis.id[:18], head.number)

    async def close(self) -> None:
        await self.watcher.stop()
        await self.gateway.close()
        close_authority = getattr(self.authority, "close", None)
        if close_authority is not None:
            await close_authority()

    async def __aenter__(self) -> Connex:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
