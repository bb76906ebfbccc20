"""Revision-bound read handles for accounts, blocks and transactions."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from thor_connex.errors import InvalidArgument
from thor_connex.interfaces.codec import AbiCodec
from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.chain import Account, Block, Code, Receipt, Storage, Transaction
from thor_connex.revision import Revision, resolve_revision
from thor_connex.thor.bindings import EventBinding, MethodBinding

log = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BYTES32_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_address(address: str) -> str:
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise InvalidArgument(f"expected a 20-byte hex address, got {address!r}")
    return address.lower()


def normalize_bytes32(value: str, what: str = "id") -> str:
    if not isinstance(value, str) or not _BYTES32_RE.match(value):
        raise InvalidArgument(f"expected a 32-byte hex {what}, got {value!r}")
    return value.lower()


class AccountVisitor:
    """Reads one account at one revision. Every get* is a fresh query."""

    def __init__(
        self,
        gateway: NodeGateway,
        codec: AbiCodec,
        address: str,
        revision: str | int | Revision | None = None,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._address = normalize_address(address)
        self._revision = resolve_revision(revision)

    @property
    def address(self) -> str:
        return self._address

    @property
    def revision(self) -> Revision:
        return self._revision

    async def get(self) -> Account | None:
        return await self._gateway.get_account(self._address, self._revision)

    async def get_code(self) -> Code | None:
        return await self._gateway.get_code(self._address, self._revision)

    async def get_storage(self, key: str) -> Storage | None:
        key = normalize_bytes32(key, "storage key")
        return await self._gateway.get_storage(self._address, key, self._revision)

    def method(self, abi: Mapping[str, Any]) -> MethodBinding:
        return MethodBinding(self._gateway, self._codec, abi, self._address, self._revision)

    def event(self, abi: Mapping[str, Any]) -> EventBinding:
        return EventBinding(self._gateway, self._codec, abi, self._address)


class BlockVisitor:
    """Reads one block. get() returns None for a well-formed unknown revision."""

    def __init__(self, gateway: NodeGateway, revision: str | int | Revision | None = None) -> None:
        self._gateway = gateway
        self._revision = resolve_revision(revision)

    @property
    def revision(self) -> Revision:
        return self._revision

    async def get(self) -> Block | None:
        block = await self._gateway.get_block(self._revision)
        if block is None:
            log.debug("Block %s not found", self._revision)
        return block


class TransactionVisitor:
    """Reads one transaction and its receipt, relative to a head hint."""

    def __init__(
        self,
        gateway: NodeGateway,
        tx_id: str,
        head: str | None = None,
        pending: bool = False,
    ) -> None:
        self._gateway = gateway
        self._id = normalize_bytes32(tx_id, "transaction id")
        self._head = normalize_bytes32(head, "head id") if head is not None else None
        self._pending = pending

    @property
    def id(self) -> str:
        return self._id

    @property
    def head(self) -> str | None:
        return self._head

    async def get(self) -> Transaction | None:
        return await self._gateway.get_transaction(self._id, self._head, self._pending)

    async def get_receipt(self) -> Receipt | None:
        """None until the transaction is mined (as seen from the head hint)."""
        return await self._gateway.get_receipt(self._id, self._head)
