"""Error taxonomy shared by the Thor and Vendor sides."""

from __future__ import annotations


class ConnexError(Exception):
    """Base class for every error raised by thor_connex."""


class InvalidArgument(ConnexError, ValueError):
    """Malformed input detected locally, before any I/O."""


class InvalidRevision(InvalidArgument):
    """A revision is neither a block id, a valid height, nor 'best'."""


class InvalidRange(InvalidArgument):
    """Pagination arguments rejected locally or by the node's page cap."""


class EncodingError(ConnexError):
    """Arguments or outputs do not match the ABI."""


class TransportFailure(ConnexError):
    """The node or signing authority could not be reached or failed (5xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Rejected(ConnexError):
    """The signing authority explicitly declined the request."""

    def __init__(self, reason: str = "rejected") -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidState(ConnexError):
    """An object was used out of order (e.g. a signing session reused)."""
