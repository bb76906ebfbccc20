"""NodeGateway protocol - raw queries against a Thor node."""

from __future__ import annotations

from typing import AsyncIterator, Protocol, Sequence

from thor_connex.models.chain import (
    Account,
    Block,
    CallOptions,
    Clause,
    Code,
    Event,
    HeadSummary,
    Receipt,
    Storage,
    Transaction,
    Transfer,
    VMOutput,
)
from thor_connex.models.filter import Criteria, FilterKind, FilterRange, Order
from thor_connex.revision import Revision


class NodeGateway(Protocol):
    """Stateless access to a Thor node. Calls may run concurrently."""

    async def get_status(self) -> HeadSummary:
        """Return the current best block summary."""
        ...

    async def get_account(self, address: str, revision: Revision) -> Account | None:
        ...

    async def get_code(self, address: str, revision: Revision) -> Code | None:
        ...

    async def get_storage(self, address: str, key: str, revision: Revision) -> Storage | None:
        ...

    async def get_block(self, revision: Revision) -> Block | None:
        """Return None when the node confirms there is no such block."""
        ...

    async def get_transaction(
        self, tx_id: str, head: str | None = None, pending: bool = False,
    ) -> Transaction | None:
        ...

    async def get_receipt(self, tx_id: str, head: str | None = None) -> Receipt | None:
        ...

    async def query_logs(
        self,
        kind: FilterKind,
        criteria_set: Sequence[Criteria],
        range_: FilterRange,
        order: Order,
        offset: int,
        limit: int,
    ) -> list[Event] | list[Transfer]:
        """Raise InvalidRange if limit exceeds the node's page cap."""
        ...

    async def explain(
        self, clauses: Sequence[Clause], options: CallOptions | None = None,
    ) -> list[VMOutput]:
        """Simulate clauses atomically against one state snapshot."""
        ...

    def watch_head(self) -> AsyncIterator[HeadSummary]:
        """Yield each new head. May raise; the caller re-subscribes."""
        ...

    async def close(self) -> None:
        ...
