"""Signing request models for the tx and cert kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SigningKind(str, Enum):
    TX = "tx"
    CERT = "cert"


class SessionState(str, Enum):
    BUILDING = "building"
    SUBMITTED = "submitted"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"
    FAILED = "failed"  # transport fault; the session is still spent


@dataclass
class TxClause:
    to: str | None
    value: str | int = 0
    data: str = "0x"
    comment: str | None = None

    def to_json(self) -> dict:
        out = {"to": self.to, "value": self.value, "data": self.data}
        if self.comment is not None:
            out["comment"] = self.comment
        return out


@dataclass
class TxMessage:
    """Clauses (with optional comments) to be signed as one transaction."""

    clauses: list[TxClause] = field(default_factory=list)
    comment: str | None = None

    def add_clause(self, clause, comment: str | None = None) -> TxMessage:
        """Append a clause; accepts a TxClause or a chain Clause."""
        if isinstance(clause, TxClause):
            if comment is not None:
                clause = TxClause(clause.to, clause.value, clause.data, comment)
        else:
            clause = TxClause(clause.to, clause.value, clause.data, comment)
        self.clauses.append(clause)
        return self

    def to_json(self) -> dict:
        out: dict = {"clauses": [c.to_json() for c in self.clauses]}
        if self.comment is not None:
            out["comment"] = self.comment
        return out


@dataclass
class CertMessage:
    """A text payload to be signed as an identity certificate."""

    content: str
    purpose: str = "identification"  # identification | agreement
    payload_type: str = "text"

    def to_json(self) -> dict:
        return {
            "purpose": self.purpose,
            "payload": {"type": self.payload_type, "content": self.content},
        }


@dataclass
class TxOptions:
    signer: str | None = None
    gas: int | None = None
    link: str | None = None  # callback url; the signer substitutes {txid}

    def to_json(self) -> dict:
        return {k: v for k, v in vars(self).items() if v is not None}


@dataclass
class CertOptions:
    signer: str | None = None

    def to_json(self) -> dict:
        return {"signer": self.signer} if self.signer is not None else {}


@dataclass(frozen=True)
class TxResult:
    """The authority accepted and broadcast the tx; inclusion is not implied."""

    tx_id: str
    signer: str


@dataclass(frozen=True)
class CertAnnex:
    domain: str
    timestamp: int
    signer: str


@dataclass(frozen=True)
class CertResult:
    annex: CertAnnex
    signature: str


@dataclass(frozen=True)
class SigningRequest:
    """Frozen payload forwarded to the signing authority."""

    id: str
    kind: SigningKind
    message: TxMessage | CertMessage
    options: TxOptions | CertOptions

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "message": self.message.to_json(),
            "options": self.options.to_json(),
        }


@dataclass
class SigningResponse:
    """Raw answer from the signing authority."""

    accepted: bool
    payload: dict | None = None
    reason: str | None = None
