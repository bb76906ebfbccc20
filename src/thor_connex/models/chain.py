"""Chain data models deserialized from Thor node responses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HeadSummary:
    """Summary of a head block, as tracked by the head watcher."""

    id: str
    number: int
    timestamp: int
    parent_id: str = ""


@dataclass(frozen=True)
class Status:
    """Chain status. progress runs from 0 to 1; 1 means fully synced."""

    progress: float
    head: HeadSummary


@dataclass(frozen=True)
class Account:
    balance: str  # hex wei
    energy: str  # hex wei
    has_code: bool


@dataclass(frozen=True)
class Code:
    code: str


@dataclass(frozen=True)
class Storage:
    value: str


@dataclass(frozen=True)
class Clause:
    """One atomic unit of a transaction."""

    to: str | None
    value: str | int
    data: str = "0x"


@dataclass(frozen=True)
class Block:
    id: str
    number: int
    size: int
    parent_id: str
    timestamp: int
    gas_limit: int
    beneficiary: str
    gas_used: int
    total_score: int
    txs_root: str
    state_root: str
    receipts_root: str
    signer: str
    transactions: list[str] = field(default_factory=list)
    is_trunk: bool | None = None  # can flip if the chain reorganizes

    def summary(self) -> HeadSummary:
        return HeadSummary(
            id=self.id,
            number=self.number,
            timestamp=self.timestamp,
            parent_id=self.parent_id,
        )


@dataclass(frozen=True)
class TxMeta:
    """Where a transaction or receipt was included."""

    block_id: str
    block_number: int
    block_timestamp: int


@dataclass(frozen=True)
class Transaction:
    id: str
    chain_tag: int
    block_ref: str
    expiration: int
    clauses: list[Clause]
    gas_price_coef: int
    gas: int
    origin: str
    nonce: str
    depends_on: str | None
    size: int
    meta: TxMeta | None = None  # None while pending


@dataclass(frozen=True)
class LogMeta:
    block_id: str
    block_number: int
    block_timestamp: int
    tx_id: str
    tx_origin: str


@dataclass(frozen=True)
class Event:
    address: str
    topics: list[str]
    data: str
    meta: LogMeta | None = None
    decoded: dict | None = None


@dataclass(frozen=True)
class Transfer:
    sender: str
    recipient: str
    amount: str
    meta: LogMeta | None = None


@dataclass(frozen=True)
class ReceiptOutput:
    """Output of one clause; parallel to the transaction's clauses."""

    contract_address: str | None
    events: list[Event] = field(default_factory=list)
    transfers: list[Transfer] = field(default_factory=list)


@dataclass(frozen=True)
class Receipt:
    gas_used: int
    gas_payer: str
    paid: str
    reward: str
    reverted: bool
    outputs: list[ReceiptOutput] = field(default_factory=list)
    meta: TxMeta | None = None


@dataclass(frozen=True)
class VMOutput:
    """Result of simulating one clause. A revert is data, not an error."""

    data: str
    vm_error: str
    gas_used: int
    reverted: bool
    events: list[Event] = field(default_factory=list)
    transfers: list[Transfer] = field(default_factory=list)
    decoded: dict | None = None


@dataclass(frozen=True)
class CallOptions:
    """Options for explain/call simulation."""

    gas: int | None = None
    gas_price: str | None = None
    caller: str | None = None
    revision: str | int | None = None
