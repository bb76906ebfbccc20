"""Protocol interfaces for external collaborators."""

from thor_connex.interfaces.authority import SigningAuthority
from thor_connex.interfaces.codec import AbiCodec
from thor_connex.interfaces.gateway import NodeGateway

__all__ = ["AbiCodec", "NodeGateway", "SigningAuthority"]
