"""Thor REST gateway - raw node queries over httpx."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, AsyncIterator, Sequence

import httpx

from thor_connex.errors import InvalidRange, TransportFailure
from thor_connex.models.chain import (
    Account,
    Block,
    CallOptions,
    Clause,
    Code,
    Event,
    HeadSummary,
    LogMeta,
    Receipt,
    ReceiptOutput,
    Storage,
    Transaction,
    Transfer,
    TxMeta,
    VMOutput,
)
from thor_connex.models.filter import Criteria, FilterKind, FilterRange, Order
from thor_connex.revision import Revision, resolve_revision

log = logging.getLogger(__name__)

_UNKNOWN_REVISION = re.compile(r"revision:.*not found", re.IGNORECASE)


# ── Response parsing ──────────────────────────────────────


def _parse_block(raw: dict) -> Block:
    return Block(
        id=raw["id"],
        number=int(raw["number"]),
        size=int(raw.get("size", 0)),
        parent_id=raw.get("parentID", ""),
        timestamp=int(raw["timestamp"]),
        gas_limit=int(raw.get("gasLimit", 0)),
        beneficiary=raw.get("beneficiary", ""),
        gas_used=int(raw.get("gasUsed", 0)),
        total_score=int(raw.get("totalScore", 0)),
        txs_root=raw.get("txsRoot", ""),
        state_root=raw.get("stateRoot", ""),
        receipts_root=raw.get("receiptsRoot", ""),
        signer=raw.get("signer", ""),
        transactions=list(raw.get("transactions", [])),
        is_trunk=raw.get("isTrunk"),
    )


def _parse_tx_meta(raw: dict | None) -> TxMeta | None:
    if not raw:
        return None
    return TxMeta(
        block_id=raw["blockID"],
        block_number=int(raw["blockNumber"]),
        block_timestamp=int(raw["blockTimestamp"]),
    )


def _parse_log_meta(raw: dict | None) -> LogMeta | None:
    if not raw:
        return None
    return LogMeta(
        block_id=raw["blockID"],
        block_number=int(raw["blockNumber"]),
        block_timestamp=int(raw["blockTimestamp"]),
        tx_id=raw.get("txID", ""),
        tx_origin=raw.get("txOrigin", ""),
    )


def _parse_clause(raw: dict) -> Clause:
    return Clause(to=raw.get("to"), value=raw.get("value", "0x0"), data=raw.get("data", "0x"))


def _parse_event(raw: dict) -> Event:
    return Event(
        address=raw["address"],
        topics=list(raw.get("topics", [])),
        data=raw.get("data", "0x"),
        meta=_parse_log_meta(raw.get("meta")),
    )


def _parse_transfer(raw: dict) -> Transfer:
    return Transfer(
        sender=raw["sender"],
        recipient=raw["recipient"],
        amount=raw["amount"],
        meta=_parse_log_meta(raw.get("meta")),
    )


def _parse_transaction(raw: dict) -> Transaction:
    return Transaction(
        id=raw["id"],
        chain_tag=int(raw.get("chainTag", 0)),
        block_ref=raw.get("blockRef", ""),
        expiration=int(raw.get("expiration", 0)),
        clauses=[_parse_clause(c) for c in raw.get("clauses", [])],
        gas_price_coef=int(raw.get("gasPriceCoef", 0)),
        gas=int(raw.get("gas", 0)),
        origin=raw.get("origin", ""),
        nonce=raw.get("nonce", ""),
        depends_on=raw.get("dependsOn"),
        size=int(raw.get("size", 0)),
        meta=_parse_tx_meta(raw.get("meta")),
    )


def _parse_receipt(raw: dict) -> Receipt:
    outputs = [
        ReceiptOutput(
            contract_address=o.get("contractAddress"),
            events=[_parse_event(e) for e in o.get("events", [])],
            transfers=[_parse_transfer(t) for t in o.get("transfers", [])],
        )
        for o in raw.get("outputs", [])
    ]
    return Receipt(
        gas_used=int(raw.get("gasUsed", 0)),
        gas_payer=raw.get("gasPayer", ""),
        paid=raw.get("paid", "0x0"),
        reward=raw.get("reward", "0x0"),
        reverted=bool(raw.get("reverted", False)),
        outputs=outputs,
        meta=_parse_tx_meta(raw.get("meta")),
    )


def _parse_vm_output(raw: dict) -> VMOutput:
    return VMOutput(
        data=raw.get("data", "0x"),
        vm_error=raw.get("vmError", ""),
        gas_used=int(raw.get("gasUsed", 0)),
        reverted=bool(raw.get("reverted", False)),
        events=[_parse_event(e) for e in raw.get("events", [])],
        transfers=[_parse_transfer(t) for t in raw.get("transfers", [])],
    )


def _clause_json(clause: Clause) -> dict:
    value = clause.value
    if isinstance(value, int):
        value = hex(value)
    return {"to": clause.to, "value": value, "data": clause.data}


# ── Gateway ───────────────────────────────────────────────


class HttpNodeGateway:
    """Implements NodeGateway against the Thor REST API.

    Holds one pooled httpx.AsyncClient; calls share no other state, so they
    can be gathered concurrently. Connection faults, timeouts and 5xx map to
    TransportFailure; a JSON null or 404 maps to None, as does the 400
    "revision: not found" the accounts API answers for an unknown revision.
    """

    def __init__(
        self,
        node_url: str,
        request_timeout: float = 15.0,
        poll_interval: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = node_url.rstrip("/")
        self._poll_interval = poll_interval
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(request_timeout, connect=10),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        limit_sensitive: bool = False,
        revision_sensitive: bool = False,
    ) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        log.debug("%s %s params=%s", method, path, params)
        try:
            resp = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"{method} {path}: timeout") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {path}: {exc}") from exc

        if resp.status_code >= 500:
            raise TransportFailure(
                f"{method} {path}: HTTP {resp.status_code}", resp.status_code,
            )
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            text = resp.text.strip()
            if limit_sensitive and "limit" in text.lower():
                raise InvalidRange(f"node rejected page size: {text[:200]}")
            if revision_sensitive and _UNKNOWN_REVISION.search(text):
                log.debug("%s %s: %s", method, path, text[:200])
                return None
            raise TransportFailure(
                f"{method} {path}: HTTP {resp.status_code}: {text[:200]}",
                resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise TransportFailure(f"{method} {path}: malformed JSON body") from exc

    # ── Blocks / status ──────────────────────────────────

    async def get_block(self, revision: Revision) -> Block | None:
        raw = await self._request("GET", f"/blocks/{revision.key}")
        return _parse_block(raw) if raw else None

    async def get_status(self) -> HeadSummary:
        block = await self.get_block(resolve_revision("best"))
        if block is None:
            raise TransportFailure("node returned no best block")
        return block.summary()

    async def watch_head(self) -> AsyncIterator[HeadSummary]:
        """Poll the best block and yield it whenever its id changes."""
        last_id: str | None = None
        while True:
            head = await self.get_status()
            if head.id != last_id:
                last_id = head.id
                yield head
            await asyncio.sleep(self._poll_interval)

    # ── Accounts ─────────────────────────────────────────

    async def get_account(self, address: str, revision: Revision) -> Account | None:
        raw = await self._request(
            "GET", f"/accounts/{address}", params={"revision": revision.key},
            revision_sensitive=True,
        )
        if not raw:
            return None
        return Account(
            balance=raw["balance"], energy=raw["energy"], has_code=bool(raw["hasCode"]),
        )

    async def get_code(self, address: str, revision: Revision) -> Code | None:
        raw = await self._request(
            "GET", f"/accounts/{address}/code", params={"revision": revision.key},
            revision_sensitive=True,
        )
        return Code(code=raw["code"]) if raw else None

    async def get_storage(self, address: str, key: str, revision: Revision) -> Storage | None:
        raw = await self._request(
            "GET", f"/accounts/{address}/storage/{key}", params={"revision": revision.key},
            revision_sensitive=True,
        )
        return Storage(value=raw["value"]) if raw else None

    # ── Transactions ─────────────────────────────────────

    async def get_transaction(
        self, tx_id: str, head: str | None = None, pending: bool = False,
    ) -> Transaction | None:
        params = {"head": head, "pending": "true" if pending else None}
        raw = await self._request("GET", f"/transactions/{tx_id}", params=params)
        return _parse_transaction(raw) if raw else None

    async def get_receipt(self, tx_id: str, head: str | None = None) -> Receipt | None:
        raw = await self._request(
            "GET", f"/transactions/{tx_id}/receipt", params={"head": head},
        )
        return _parse_receipt(raw) if raw else None

    # ── Logs ─────────────────────────────────────────────

    async def query_logs(
        self,
        kind: FilterKind,
        criteria_set: Sequence[Criteria],
        range_: FilterRange,
        order: Order,
        offset: int,
        limit: int,
    ) -> list[Event] | list[Transfer]:
        body = {
            "range": range_.to_json(),
            "options": {"offset": offset, "limit": limit},
            "criteriaSet": [c.to_json() for c in criteria_set],
            "order": order.value,
        }
        raw = await self._request(
            "POST", f"/logs/{kind.value}", json=body, limit_sensitive=True,
        )
        raw = raw or []
        if kind is FilterKind.EVENT:
            return [_parse_event(r) for r in raw]
        return [_parse_transfer(r) for r in raw]

    # ── Simulation ───────────────────────────────────────

    async def explain(
        self, clauses: Sequence[Clause], options: CallOptions | None = None,
    ) -> list[VMOutput]:
        options = options or CallOptions()
        body: dict = {"clauses": [_clause_json(c) for c in clauses]}
        if options.gas is not None:
            body["gas"] = options.gas
        if options.gas_price is not None:
            body["gasPrice"] = options.gas_price
        if options.caller is not None:
            body["caller"] = options.caller
        revision = resolve_revision(options.revision)
        raw = await self._request(
            "POST", "/accounts/*", params={"revision": revision.key}, json=body,
        )
        return [_parse_vm_output(o) for o in raw or []]
