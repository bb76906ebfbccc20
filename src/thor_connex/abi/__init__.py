"""ABI codec integration."""

from thor_connex.abi.codec import EthAbiCodec

__all__ = ["EthAbiCodec"]
