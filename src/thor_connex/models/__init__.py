"""Data models for thor_connex."""

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
    Status,
    Storage,
    Transaction,
    Transfer,
    TxMeta,
    VMOutput,
)
from thor_connex.models.config import ConnexConfig, NETWORK_NODES
from thor_connex.models.filter import (
    EventCriteria,
    FilterKind,
    FilterRange,
    Order,
    RangeUnit,
    TransferCriteria,
)
from thor_connex.models.signing import (
    CertAnnex,
    CertMessage,
    CertOptions,
    CertResult,
    SessionState,
    SigningKind,
    SigningRequest,
    SigningResponse,
    TxClause,
    TxMessage,
    TxOptions,
    TxResult,
)

__all__ = [
    "Account", "Block", "CallOptions", "Clause", "Code", "Event", "HeadSummary",
    "LogMeta", "Receipt", "ReceiptOutput", "Status", "Storage", "Transaction",
    "Transfer", "TxMeta", "VMOutput",
    "ConnexConfig", "NETWORK_NODES",
    "EventCriteria", "FilterKind", "FilterRange", "Order", "RangeUnit",
    "TransferCriteria",
    "CertAnnex", "CertMessage", "CertOptions", "CertResult", "SessionState",
    "SigningKind", "SigningRequest", "SigningResponse", "TxClause", "TxMessage",
    "TxOptions", "TxResult",
]
