"""SigningAuthority protocol - external signer (wallet) for tx and cert requests."""

from __future__ import annotations

from typing import Protocol

from thor_connex.models.signing import SigningRequest, SigningResponse


class SigningAuthority(Protocol):
    """Signs requests on behalf of the user. Never shares key material."""

    async def submit(self, request: SigningRequest) -> SigningResponse:
        """Deliver a request and wait for the user's decision.

        Raises TransportFailure when the authority cannot be reached; an
        explicit decline is a SigningResponse with accepted=False.
        """
        ...

    async def cancel(self, request_id: str) -> bool:
        """Withdraw a request. True only if nothing was signed."""
        ...
