"""Revision normalization: block id, height, or 'best'."""

from __future__ import annotations

import re
from dataclasses import dataclass

from thor_connex.errors import InvalidRevision
from thor_connex.models.filter import MAX_UINT32

BEST = "best"

_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_DEC_RE = re.compile(r"^[0-9]+$")
_HEX_NUM_RE = re.compile(r"^0x[0-9a-fA-F]{1,8}$")


@dataclass(frozen=True)
class Revision:
    """A resolved revision. Exactly one of block_id / number is set unless best."""

    block_id: str | None = None
    number: int | None = None

    @property
    def is_best(self) -> bool:
        return self.block_id is None and self.number is None

    @property
    def key(self) -> str:
        """Lookup key as the node expects it in a path or query string."""
        if self.block_id is not None:
            return self.block_id
        if self.number is not None:
            return str(self.number)
        return BEST

    def __str__(self) -> str:
        return self.key


class RevisionResolver:
    """Turns user revisions into Revision values without touching the node.

    Heights are bounded by the chain's uint32 block number. Whether a valid
    revision actually exists is only known once a visitor queries it.
    """

    def __init__(self, max_number: int = MAX_UINT32) -> None:
        self._max_number = max_number

    def resolve(self, value: str | int | Revision | None = None) -> Revision:
        if isinstance(value, Revision):
            return value
        if value is None:
            return Revision()
        # bool is an int subclass; True is not a height
        if isinstance(value, bool):
            raise InvalidRevision(f"invalid revision: {value!r}")
        if isinstance(value, int):
            return Revision(number=self._check_number(value))
        if isinstance(value, float):
            if not value.is_integer():
                raise InvalidRevision(f"revision must be integral: {value!r}")
            return Revision(number=self._check_number(int(value)))
        if isinstance(value, str):
            return self._resolve_str(value.strip())
        raise InvalidRevision(f"unsupported revision type: {type(value).__name__}")

    def _resolve_str(self, text: str) -> Revision:
        if text.lower() == BEST:
            return Revision()
        if _ID_RE.match(text):
            return Revision(block_id=text.lower())
        if _DEC_RE.match(text):
            return Revision(number=self._check_number(int(text)))
        if _HEX_NUM_RE.match(text):
            return Revision(number=self._check_number(int(text, 16)))
        raise InvalidRevision(f"invalid revision: {text!r}")

    def _check_number(self, number: int) -> int:
        if number < 0:
            raise InvalidRevision(f"revision must be non-negative: {number}")
        if number > self._max_number:
            raise InvalidRevision(f"revision exceeds block number bound: {number}")
        return number


_default_resolver = RevisionResolver()


def resolve_revision(value: str | int | Revision | None = None) -> Revision:
    """Resolve with the default uint32-bounded resolver."""
    return _default_resolver.resolve(value)
