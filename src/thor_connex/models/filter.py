"""Log filter models: kinds, criteria, ranges and ordering."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

MAX_UINT32 = 2**32 - 1


class FilterKind(str, Enum):
    EVENT = "event"
    TRANSFER = "transfer"


class RangeUnit(str, Enum):
    BLOCK = "block"
    TIME = "time"


class Order(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class EventCriteria:
    """Conjunctive predicate over an event's address and topics."""

    address: str | None = None
    topic0: str | None = None
    topic1: str | None = None
    topic2: str | None = None
    topic3: str | None = None
    topic4: str | None = None

    def to_json(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class TransferCriteria:
    """Conjunctive predicate over a transfer's origin, sender and recipient."""

    tx_origin: str | None = None
    sender: str | None = None
    recipient: str | None = None

    def to_json(self) -> dict:
        out = {}
        if self.tx_origin is not None:
            out["txOrigin"] = self.tx_origin
        if self.sender is not None:
            out["sender"] = self.sender
        if self.recipient is not None:
            out["recipient"] = self.recipient
        return out


Criteria = EventCriteria | TransferCriteria

CRITERIA_TYPES: dict[FilterKind, type] = {
    FilterKind.EVENT: EventCriteria,
    FilterKind.TRANSFER: TransferCriteria,
}


@dataclass(frozen=True)
class FilterRange:
    """Inclusive [from_, to] bound in block numbers or unix seconds."""

    unit: RangeUnit = RangeUnit.BLOCK
    from_: int = 0
    to: int = MAX_UINT32

    @property
    def is_empty(self) -> bool:
        return self.from_ > self.to

    def to_json(self) -> dict:
        return {"unit": self.unit.value, "from": self.from_, "to": self.to}
