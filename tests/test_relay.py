"""RelaySigningAuthority against a local fake relay."""

from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

from thor_connex.errors import Rejected, TransportFailure
from thor_connex.models.signing import (
    CertMessage,
    CertOptions,
    SessionState,
    SigningKind,
    SigningRequest,
    TxClause,
    TxMessage,
    TxOptions,
)
from thor_connex.vendor.facade import Vendor
from thor_connex.vendor.relay import RelaySigningAuthority
from tests.factories import BOB
from tests.mocks import SIGNED_TX_ID, SIGNER


@pytest.fixture
async def fake_relay():
    """Fake relay on an ephemeral port. Yields (base_url, state).

    state["decisions"] maps request id -> response body; a request without a
    decision answers 404 until one is filled in. state["polls_before_decision"]
    delays the default decision by that many polls.
    """
    state = {
        "requests": {},
        "decisions": {},
        "polls": 0,
        "polls_before_decision": 0,
        "default_decision": {"accepted": True, "payload": {"txId": SIGNED_TX_ID, "signer": SIGNER}},
        "cancel_confirms": True,
        "deleted": [],
        "post_status": 201,
    }

    async def post_request(request):
        rid = request.match_info["rid"]
        if state["post_status"] >= 400:
            return web.Response(status=state["post_status"])
        state["requests"][rid] = await request.json()
        return web.json_response({"id": rid}, status=state["post_status"])

    async def get_response(request):
        rid = request.match_info["rid"]
        state["polls"] += 1
        if rid in state["decisions"]:
            return web.json_response(state["decisions"][rid])
        if state["default_decision"] and state["polls"] > state["polls_before_decision"]:
            return web.json_response(state["default_decision"])
        return web.Response(status=404)

    async def delete_request(request):
        rid = request.match_info["rid"]
        state["deleted"].append(rid)
        return web.json_response({"cancelled": state["cancel_confirms"]})

    app = web.Application()
    app.router.add_post("/requests/{rid}", post_request)
    app.router.add_get("/requests/{rid}/response", get_response)
    app.router.add_delete("/requests/{rid}", delete_request)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    yield f"http://127.0.0.1:{port}", state
    await runner.cleanup()


@pytest.fixture
async def relay(fake_relay):
    base_url, _ = fake_relay
    authority = RelaySigningAuthority(base_url, poll_interval=0.01, timeout=2, request_timeout=5)
    yield authority
    await authority.close()


def _tx_request(rid: str = "req-1") -> SigningRequest:
    return SigningRequest(
        id=rid,
        kind=SigningKind.TX,
        message=TxMessage(clauses=[TxClause(to=BOB, value="0x1")]),
        options=TxOptions(signer=SIGNER),
    )


# ── Submit ───────────────────────────────────────────────────────


async def test_submit_delivers_payload_and_waits(relay, fake_relay):
    _, state = fake_relay
    state["polls_before_decision"] = 3

    response = await relay.submit(_tx_request())

    assert response.accepted is True
    assert response.payload["txId"] == SIGNED_TX_ID
    assert state["polls"] == 4
    assert state["requests"]["req-1"] == {
        "id": "req-1",
        "kind": "tx",
        "message": {"clauses": [{"to": BOB, "value": "0x1", "data": "0x"}]},
        "options": {"signer": SIGNER},
    }


async def test_submit_rejected_decision(relay, fake_relay):
    _, state = fake_relay
    state["decisions"]["req-1"] = {"accepted": False, "reason": "user declined"}

    response = await relay.submit(_tx_request())

    assert response.accepted is False
    assert response.reason == "user declined"


async def test_relay_refuses_request(relay, fake_relay):
    fake_relay[1]["post_status"] = 409
    with pytest.raises(TransportFailure) as exc_info:
        await relay.submit(_tx_request())
    assert exc_info.value.status_code == 409


async def test_expired_request_is_withdrawn(fake_relay):
    base_url, state = fake_relay
    state["default_decision"] = None
    authority = RelaySigningAuthority(base_url, poll_interval=0.01, timeout=0.05)
    try:
        response = await authority.submit(_tx_request("req-slow"))
    finally:
        await authority.close()

    assert response.accepted is False
    assert response.reason == "expired"
    assert state["deleted"] == ["req-slow"]


async def test_expired_unconfirmed_is_transport_failure(fake_relay):
    base_url, state = fake_relay
    state["default_decision"] = None
    state["cancel_confirms"] = False
    authority = RelaySigningAuthority(base_url, poll_interval=0.01, timeout=0.05)
    try:
        with pytest.raises(TransportFailure):
            await authority.submit(_tx_request())
    finally:
        await authority.close()


async def test_unreachable_relay():
    authority = RelaySigningAuthority("http://127.0.0.1:1", request_timeout=2)
    try:
        with pytest.raises(TransportFailure):
            await authority.submit(_tx_request())
    finally:
        await authority.close()


# ── Cancel ───────────────────────────────────────────────────────


async def test_cancel(relay, fake_relay):
    assert await relay.cancel("req-1") is True
    fake_relay[1]["cancel_confirms"] = False
    assert await relay.cancel("req-2") is False
    assert fake_relay[1]["deleted"] == ["req-1", "req-2"]


# ── Through a signing session ────────────────────────────────────


async def test_session_over_relay(relay, fake_relay):
    _, state = fake_relay
    state["default_decision"] = {
        "accepted": True,
        "payload": {
            "annex": {"domain": "app.example.org", "timestamp": 1_700_000_000, "signer": SIGNER},
            "signature": "0x" + "22" * 65,
        },
    }
    session = Vendor(relay).sign("cert").message(CertMessage(content="hello"))

    result = await session.request(CertOptions(signer=SIGNER))

    assert result.annex.timestamp == 1_700_000_000
    assert session.state is SessionState.FULFILLED
    sent = state["requests"][session.request_id]
    assert sent["message"]["payload"] == {"type": "text", "content": "hello"}


async def test_session_cancel_over_relay(relay, fake_relay):
    _, state = fake_relay
    state["default_decision"] = None
    session = Vendor(relay).sign("tx").message(TxMessage(clauses=[TxClause(to=BOB)]))
    pending = asyncio.create_task(session.request())
    while not state["requests"]:
        await asyncio.sleep(0.01)

    assert await session.cancel() is True

    with pytest.raises(Rejected):
        await pending
    assert state["deleted"] == [session.request_id]
