"""thor_connex - async access layer for VeChainThor and external signers."""

from thor_connex.connex import Connex
from thor_connex.errors import (
    ConnexError,
    EncodingError,
    InvalidArgument,
    InvalidRange,
    InvalidRevision,
    InvalidState,
    Rejected,
    TransportFailure,
)
from thor_connex.revision import Revision, RevisionResolver, resolve_revision

__all__ = [
    "Connex",
    "ConnexError", "EncodingError", "InvalidArgument", "InvalidRange",
    "InvalidRevision", "InvalidState", "Rejected", "TransportFailure",
    "Revision", "RevisionResolver", "resolve_revision",
]
