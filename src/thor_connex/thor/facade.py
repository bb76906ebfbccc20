"""Thor facade - the host application's entry point for chain access."""

from __future__ import annotations

import logging
import time
from typing import Sequence

from thor_connex.errors import InvalidArgument
from thor_connex.interfaces.codec import AbiCodec
from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.chain import Block, CallOptions, Clause, Status, VMOutput
from thor_connex.models.filter import Criteria, FilterKind
from thor_connex.thor.filter import LogFilter
from thor_connex.thor.ticker import HeadWatcher, Ticker
from thor_connex.thor.visitors import (
    AccountVisitor,
    BlockVisitor,
    TransactionVisitor,
    normalize_address,
)

log = logging.getLogger(__name__)

# A head younger than this is considered synced
SYNC_TOLERANCE = 30  # seconds


class Thor:
    """Chain access anchored to one genesis block and one head watcher.

    Visitors created without an explicit revision (or head hint) are anchored
    to the head tracked at construction time, so everything read through one
    visitor comes from one consistent state.
    """

    def __init__(
        self,
        gateway: NodeGateway,
        codec: AbiCodec,
        genesis: Block,
        watcher: HeadWatcher,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._genesis = genesis
        self._watcher = watcher

    @property
    def genesis(self) -> Block:
        return self._genesis

    @property
    def status(self) -> Status:
        head = self._watcher.head or self._genesis.summary()
        return Status(progress=self._progress(head.timestamp), head=head)

    def _progress(self, head_ts: int) -> float:
        now = time.time()
        if now - head_ts < SYNC_TOLERANCE:
            return 1.0
        span = now - self._genesis.timestamp
        if span <= 0:
            return 1.0
        return max(0.0, min(1.0, (head_ts - self._genesis.timestamp) / span))

    def ticker(self) -> Ticker:
        self._watcher.start()
        return Ticker(self._watcher)

    def account(self, address: str, revision: str | int | None = None) -> AccountVisitor:
        if revision is None and self._watcher.head is not None:
            revision = self._watcher.head.id
        return AccountVisitor(self._gateway, self._codec, address, revision)

    def block(self, revision: str | int | None = None) -> BlockVisitor:
        if revision is None and self._watcher.head is not None:
            revision = self._watcher.head.id
        return BlockVisitor(self._gateway, revision)

    def transaction(
        self, tx_id: str, head: str | None = None, pending: bool = False,
    ) -> TransactionVisitor:
        if head is None and self._watcher.head is not None:
            head = self._watcher.head.id
        return TransactionVisitor(self._gateway, tx_id, head=head, pending=pending)

    def filter(self, kind: FilterKind | str, criteria_set: Sequence[Criteria] = ()) -> LogFilter:
        return LogFilter(self._gateway, kind, criteria_set)

    async def explain(
        self, clauses: Sequence[Clause], options: CallOptions | None = None,
    ) -> list[VMOutput]:
        """Simulate clauses atomically. Reverts are reported in the outputs."""
        if not clauses:
            raise InvalidArgument("explain requires at least one clause")
        for clause in clauses:
            if clause.to is not None:
                normalize_address(clause.to)
        return await self._gateway.explain(list(clauses), options)
