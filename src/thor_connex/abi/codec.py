"""ABI codec backed by eth-abi, for Thor's EVM-compatible contracts."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_hash.auto import keccak

from thor_connex.errors import EncodingError

log = logging.getLogger(__name__)

_ENCODE_ERRORS = (AbiEncodingError, TypeError, ValueError, OverflowError)


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def from_hex(text: str) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string."""
    body = text[2:] if text[:2] in ("0x", "0X") else text
    try:
        return bytes.fromhex(body)
    except ValueError as exc:
        raise EncodingError(f"invalid hex data: {text[:20]}") from exc


def canonical_type(param: Mapping[str, Any]) -> str:
    """Expand tuple params into eth-abi's '(t1,t2)[]' notation."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def signature(abi: Mapping[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in abi.get("inputs", []))
    return f"{abi['name']}({types})"


def _is_dynamic(typ: str) -> bool:
    return typ in ("string", "bytes") or typ.endswith("]") or typ.startswith("(")


def _coerce(typ: str, value: Any) -> Any:
    """Accept the loose JSON-ish inputs callers pass (numeric strings, hex bytes)."""
    if typ.endswith("]") and isinstance(value, (list, tuple)):
        elem = typ[: typ.rindex("[")]
        return [_coerce(elem, v) for v in value]
    if (typ.startswith("uint") or typ.startswith("int")) and isinstance(value, str):
        return int(value, 0)
    if typ.startswith("bytes") and isinstance(value, str):
        return from_hex(value)
    return value


def _normalize(typ: str, value: Any) -> Any:
    """Render decoded values the way they cross the boundary: lowercase hex."""
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if typ == "address" and isinstance(value, str):
        return value.lower()
    if isinstance(value, (list, tuple)):
        elem = typ[: typ.rindex("[")] if typ.endswith("]") else ""
        return [_normalize(elem, v) for v in value]
    return value


def _keyed(params: Sequence[Mapping[str, Any]], values: Sequence[Any]) -> dict:
    out: dict = {}
    for i, (param, value) in enumerate(zip(params, values)):
        out[str(i)] = value
        if param.get("name"):
            out[param["name"]] = value
    return out


class EthAbiCodec:
    """Implements AbiCodec over JSON ABI fragments.

    Decoded values are keyed both by position ("0", "1", ...) and by
    parameter name, with addresses lowercased and bytes rendered as hex.
    """

    def selector(self, abi: Mapping[str, Any]) -> bytes:
        return keccak(signature(abi).encode("utf-8"))[:4]

    def event_topic(self, abi: Mapping[str, Any]) -> str:
        return to_hex(keccak(signature(abi).encode("utf-8")))

    def encode_args(self, abi: Mapping[str, Any], args: Sequence[Any]) -> bytes:
        _require_kind(abi, "function")
        inputs = abi.get("inputs", [])
        if len(args) != len(inputs):
            raise EncodingError(
                f"{abi.get('name')}: expected {len(inputs)} args, got {len(args)}"
            )
        types = [canonical_type(p) for p in inputs]
        try:
            values = [_coerce(t, a) for t, a in zip(types, args)]
            body = abi_encode(types, values)
        except _ENCODE_ERRORS as exc:
            raise EncodingError(f"{abi.get('name')}: {exc}") from exc
        return self.selector(abi) + body

    def decode_args(self, abi: Mapping[str, Any], data: bytes) -> dict:
        """Inverse of encode_args, for inspecting clause data."""
        _require_kind(abi, "function")
        if data[:4] != self.selector(abi):
            raise EncodingError(f"{abi.get('name')}: selector mismatch")
        return self._decode(abi.get("inputs", []), data[4:])

    def decode_output(self, abi: Mapping[str, Any], data: bytes) -> dict:
        _require_kind(abi, "function")
        return self._decode(abi.get("outputs", []), data)

    def topics_from_indexed(
        self, abi: Mapping[str, Any], indexed: Mapping[str, Any],
    ) -> list[str | None]:
        _require_kind(abi, "event")
        params = [p for p in abi.get("inputs", []) if p.get("indexed")]
        unknown = set(indexed) - {p.get("name") for p in params}
        if unknown:
            raise EncodingError(
                f"{abi.get('name')}: unknown indexed fields {sorted(unknown)}"
            )

        topics: list[str | None] = []
        if not abi.get("anonymous"):
            topics.append(self.event_topic(abi))
        for param in params:
            value = indexed.get(param["name"])
            topics.append(None if value is None else self._encode_topic(param, value))
        return topics

    def decode_event(
        self, abi: Mapping[str, Any], topics: Sequence[str], data: bytes,
    ) -> dict:
        _require_kind(abi, "event")
        inputs = abi.get("inputs", [])
        offset = 0
        if not abi.get("anonymous"):
            if not topics or topics[0].lower() != self.event_topic(abi):
                raise EncodingError(f"{abi.get('name')}: topic0 mismatch")
            offset = 1

        indexed = [p for p in inputs if p.get("indexed")]
        if len(topics) < offset + len(indexed):
            raise EncodingError(f"{abi.get('name')}: not enough topics")

        by_param: dict[int, Any] = {}
        for i, param in enumerate(indexed):
            topic = topics[offset + i]
            typ = canonical_type(param)
            if _is_dynamic(typ):
                # dynamic values are hashed into the topic; only the hash survives
                by_param[id(param)] = topic.lower()
            else:
                by_param[id(param)] = self._decode([param], from_hex(topic))["0"]

        plain = [p for p in inputs if not p.get("indexed")]
        decoded = self._decode(plain, data)
        for i, param in enumerate(plain):
            by_param[id(param)] = decoded[str(i)]

        return _keyed(inputs, [by_param[id(p)] for p in inputs])

    def _encode_topic(self, param: Mapping[str, Any], value: Any) -> str:
        typ = canonical_type(param)
        try:
            if typ == "string":
                return to_hex(keccak(str(value).encode("utf-8")))
            if typ == "bytes":
                return to_hex(keccak(_coerce("bytes", value)))
            if _is_dynamic(typ):
                raise EncodingError(f"cannot filter on indexed {typ} '{param['name']}'")
            return to_hex(abi_encode([typ], [_coerce(typ, value)]))
        except _ENCODE_ERRORS as exc:
            raise EncodingError(f"indexed '{param['name']}': {exc}") from exc

    def _decode(self, params: Sequence[Mapping[str, Any]], data: bytes) -> dict:
        types = [canonical_type(p) for p in params]
        try:
            values = abi_decode(types, data)
        except (DecodingError, ValueError, TypeError) as exc:
            raise EncodingError(f"cannot decode {types}: {exc}") from exc
        return _keyed(params, [_normalize(t, v) for t, v in zip(types, values)])


def _require_kind(abi: Mapping[str, Any], kind: str) -> None:
    if abi.get("type", "function") != kind:
        raise EncodingError(f"expected a {kind} ABI, got {abi.get('type')!r}")
    if not abi.get("name"):
        raise EncodingError(f"{kind} ABI has no name")
