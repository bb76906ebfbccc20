"""AbiCodec protocol - encodes and decodes contract ABI data."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class AbiCodec(Protocol):
    """ABI encoding for JSON ABI fragments (one method or event each).

    All failures surface as EncodingError.
    """

    def encode_args(self, abi: Mapping[str, Any], args: Sequence[Any]) -> bytes:
        """Selector plus encoded arguments for a method call."""
        ...

    def decode_output(self, abi: Mapping[str, Any], data: bytes) -> dict:
        """Decode return data into a dict keyed by position and by name."""
        ...

    def topics_from_indexed(
        self, abi: Mapping[str, Any], indexed: Mapping[str, Any],
    ) -> list[str | None]:
        """Positional topics for an event; None where a topic is unconstrained."""
        ...

    def decode_event(
        self, abi: Mapping[str, Any], topics: Sequence[str], data: bytes,
    ) -> dict:
        ...
