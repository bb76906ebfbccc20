"""Contract method and event bindings over an account visitor's address."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

from thor_connex.abi.codec import from_hex, to_hex
from thor_connex.errors import EncodingError, TransportFailure
from thor_connex.interfaces.codec import AbiCodec
from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.chain import CallOptions, Clause, Event, VMOutput
from thor_connex.models.filter import EventCriteria, FilterKind
from thor_connex.revision import Revision
from thor_connex.thor.filter import LogFilter

log = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")
_DEC_RE = re.compile(r"^[0-9]+$")

# Error(string), the standard revert payload
_REVERT_SELECTOR = "0x08c379a0"
_REVERT_ABI = {
    "type": "function",
    "name": "Error",
    "inputs": [],
    "outputs": [{"type": "string", "name": "reason"}],
}

MAX_TOPICS = 5


def normalize_value(value: str | int) -> str:
    """Render a VET amount as lowercase hex; accepts int, decimal or hex strings."""
    if isinstance(value, bool):
        raise EncodingError(f"invalid value: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise EncodingError(f"value must be non-negative: {value}")
        return hex(value)
    if isinstance(value, str):
        text = value.strip()
        if _HEX_RE.match(text):
            return hex(int(text, 16))
        if _DEC_RE.match(text):
            return hex(int(text))
    raise EncodingError(f"invalid value: {value!r}")


class MethodBinding:
    """Builds clauses for, and simulates calls to, one contract method."""

    def __init__(
        self,
        gateway: NodeGateway,
        codec: AbiCodec,
        abi: Mapping[str, Any],
        address: str,
        revision: Revision,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._abi = abi
        self._address = address
        self._revision = revision

    @property
    def abi(self) -> Mapping[str, Any]:
        return self._abi

    def as_clause(self, args: Sequence[Any] = (), value: str | int = 0) -> Clause:
        """Encode a clause offline. Raises EncodingError on ABI mismatch."""
        data = self._codec.encode_args(self._abi, list(args))
        return Clause(to=self._address, value=normalize_value(value), data=to_hex(data))

    async def call(
        self,
        args: Sequence[Any] = (),
        value: str | int = 0,
        options: CallOptions | None = None,
    ) -> VMOutput:
        """Simulate the method. A revert is returned in the output, not raised."""
        clause = self.as_clause(args, value)
        options = options or CallOptions()
        if options.revision is None:
            options = replace(options, revision=self._revision.key)

        outputs = await self._gateway.explain([clause], options)
        if len(outputs) != 1:
            raise TransportFailure(f"explain returned {len(outputs)} outputs for 1 clause")
        output = outputs[0]

        if output.reverted:
            log.debug("Call %s reverted: %s", self._abi.get("name"), output.vm_error)
            reason = self._revert_reason(output.data)
            if reason is not None:
                return replace(output, decoded={"revertReason": reason})
            return output

        if not self._abi.get("outputs"):
            return output
        decoded = self._codec.decode_output(self._abi, from_hex(output.data))
        return replace(output, decoded=decoded)

    def _revert_reason(self, data: str) -> str | None:
        if not data or not data.lower().startswith(_REVERT_SELECTOR):
            return None
        try:
            return self._codec.decode_output(_REVERT_ABI, from_hex(data)[4:])["reason"]
        except EncodingError:
            return None


class EventBinding:
    """Builds criteria and filters for one contract event."""

    def __init__(
        self,
        gateway: NodeGateway,
        codec: AbiCodec,
        abi: Mapping[str, Any],
        address: str,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._abi = abi
        self._address = address

    @property
    def abi(self) -> Mapping[str, Any]:
        return self._abi

    def as_criteria(self, indexed: Mapping[str, Any] | None = None) -> EventCriteria:
        """Map named indexed args onto topic0..topic4, scoped to our address."""
        topics = self._codec.topics_from_indexed(self._abi, indexed or {})
        if len(topics) > MAX_TOPICS:
            raise EncodingError(f"{self._abi.get('name')}: too many indexed topics")
        fields = {f"topic{i}": t for i, t in enumerate(topics) if t is not None}
        return EventCriteria(address=self._address, **fields)

    def filter(self, indexed_set: Iterable[Mapping[str, Any]] = ()) -> LogFilter:
        """An event filter whose criteria set is the disjunction of indexed_set."""
        criteria = [self.as_criteria(indexed) for indexed in indexed_set]
        if not criteria:
            criteria = [self.as_criteria({})]
        return LogFilter(self._gateway, FilterKind.EVENT, criteria, decoder=self.decode)

    def decode(self, event: Event) -> Event:
        decoded = self._codec.decode_event(self._abi, event.topics, from_hex(event.data))
        return replace(event, decoded=decoded)
