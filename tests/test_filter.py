"""Log filter: criteria, ranges, ordering and pagination."""

from __future__ import annotations

import pytest

from thor_connex.errors import InvalidArgument, InvalidRange
from thor_connex.models.filter import (
    MAX_UINT32,
    EventCriteria,
    FilterKind,
    FilterRange,
    Order,
    RangeUnit,
    TransferCriteria,
)
from thor_connex.thor.filter import LogFilter
from tests.factories import ALICE, BOB, CONTRACT, GENESIS_TIMESTAMP, make_event, make_transfer


@pytest.fixture
def transfers(mock_gateway):
    """Twelve transfers from ALICE in blocks 1..12, one from BOB in block 6."""
    mock_gateway.transfers = [make_transfer(n) for n in range(1, 13)]
    mock_gateway.transfers.insert(6, make_transfer(6, tx=1, sender=BOB, recipient=ALICE))
    return mock_gateway.transfers


def _query_calls(gateway):
    return [c for c in gateway.calls if c[0] == "query_logs"]


# ── Defaults ─────────────────────────────────────────────────────


async def test_defaults(thor):
    flt = thor.filter("transfer")
    assert flt.kind is FilterKind.TRANSFER
    assert flt.criteria_set == []
    assert flt.current_range == FilterRange(RangeUnit.BLOCK, 0, MAX_UINT32)
    assert flt.order is Order.ASC


async def test_empty_criteria_matches_all(thor, transfers):
    logs = await thor.filter("transfer").apply(0, 100)
    assert len(logs) == len(transfers)


# ── Pages ────────────────────────────────────────────────────────


async def test_first_page_ascending(thor, mock_gateway, transfers):
    flt = thor.filter("transfer", [TransferCriteria(sender=ALICE)]).range("block", 0, 100)

    page = await flt.apply(0, 10)

    assert [t.meta.block_number for t in page] == list(range(1, 11))
    assert all(t.sender == ALICE for t in page)
    _, kind, criteria, range_, order, offset, limit = _query_calls(mock_gateway)[-1]
    assert kind is FilterKind.TRANSFER
    assert criteria == [TransferCriteria(sender=ALICE)]
    assert range_ == FilterRange(RangeUnit.BLOCK, 0, 100)
    assert (order, offset, limit) == (Order.ASC, 0, 10)


async def test_offset_past_end_is_short(thor, transfers):
    flt = thor.filter("transfer", [TransferCriteria(sender=ALICE)])
    page = await flt.apply(10, 10)
    assert [t.meta.block_number for t in page] == [11, 12]
    assert await flt.apply(50, 10) == []


async def test_descending_newest_first(thor, transfers):
    flt = thor.filter("transfer", [TransferCriteria(sender=ALICE)]).desc()
    page = await flt.apply(0, 3)
    assert [t.meta.block_number for t in page] == [12, 11, 10]


async def test_offset_counts_in_configured_order(thor, transfers):
    flt = thor.filter("transfer").desc()
    assert [t.meta.block_number for t in await flt.apply(1, 2)] == [11, 10]


async def test_desc_is_idempotent_and_reversible(thor):
    flt = thor.filter("event")
    assert flt.desc().desc() is flt
    assert flt.order is Order.DESC
    assert flt.asc().order is Order.ASC


async def test_criteria_set_is_a_disjunction(thor, transfers):
    flt = thor.filter("transfer", [
        TransferCriteria(sender=BOB),
        TransferCriteria(recipient=BOB, sender=ALICE),
    ])
    page = await flt.apply(0, 100)
    assert len(page) == len(transfers)


async def test_time_unit_range(thor, transfers):
    start = GENESIS_TIMESTAMP + 3 * 10
    flt = thor.filter("transfer", [TransferCriteria(sender=ALICE)]).range("time", start, start + 20)
    page = await flt.apply(0, 10)
    assert [t.meta.block_number for t in page] == [3, 4, 5]


async def test_reconfigure_between_applies(thor, mock_gateway, transfers):
    flt = thor.filter("transfer", [TransferCriteria(sender=ALICE)])
    await flt.apply(0, 5)
    flt.range(FilterRange(RangeUnit.BLOCK, 5, 6)).desc()
    page = await flt.apply(0, 5)
    assert [t.meta.block_number for t in page] == [6, 5]
    assert len(_query_calls(mock_gateway)) == 2


async def test_events_by_topic(thor, mock_gateway):
    wanted = "0x" + "01" * 32
    mock_gateway.events = [
        make_event(1, topics=[wanted]),
        make_event(2, topics=["0x" + "02" * 32]),
        make_event(3, address=BOB, topics=[wanted]),
    ]
    flt = thor.filter("event", [EventCriteria(address=CONTRACT, topic0=wanted)])
    page = await flt.apply(0, 10)
    assert [e.meta.block_number for e in page] == [1]


# ── Empty and rejected pages ─────────────────────────────────────


async def test_inverted_range_is_empty_without_round_trip(thor, mock_gateway, transfers):
    flt = thor.filter("transfer").range("block", 10, 5)
    assert await flt.apply(0, 10) == []
    assert _query_calls(mock_gateway) == []


async def test_zero_limit_is_empty(thor, mock_gateway, transfers):
    assert await thor.filter("transfer").apply(0, 0) == []
    assert _query_calls(mock_gateway) == []


@pytest.mark.parametrize("offset, limit", [(-1, 10), (0, -1), (1.5, 10), (0, "10"), (True, 10)])
async def test_bad_pagination(thor, mock_gateway, offset, limit):
    with pytest.raises(InvalidRange):
        await thor.filter("transfer").apply(offset, limit)
    assert _query_calls(mock_gateway) == []


async def test_node_page_cap(thor, mock_gateway):
    mock_gateway.page_cap = 256
    with pytest.raises(InvalidRange):
        await thor.filter("transfer").apply(0, 1000)


@pytest.mark.parametrize("from_, to", [(-1, 10), (0, -5), (0.5, 10), (None, 10)])
async def test_bad_range(thor, from_, to):
    with pytest.raises(InvalidRange):
        thor.filter("event").range("block", from_, to)


async def test_unknown_unit(thor):
    with pytest.raises(ValueError):
        thor.filter("event").range("epoch", 0, 1)
    with pytest.raises(ValueError):
        thor.filter("event").range(FilterRange(unit="epoch", from_=0, to=1))


async def test_range_object_with_string_unit(thor, mock_gateway, transfers):
    flt = thor.filter("transfer").range(FilterRange(unit="time", from_=0, to=MAX_UINT32))

    assert flt.current_range.unit is RangeUnit.TIME
    assert flt.current_range.to_json()["unit"] == "time"
    await flt.apply(0, 5)
    assert len(_query_calls(mock_gateway)) == 1


def test_criteria_must_match_kind(mock_gateway):
    with pytest.raises(InvalidArgument):
        LogFilter(mock_gateway, "event", [TransferCriteria(sender=ALICE)])
    with pytest.raises(InvalidArgument):
        LogFilter(mock_gateway, FilterKind.TRANSFER, [EventCriteria(address=CONTRACT)])


def test_unknown_kind(mock_gateway):
    with pytest.raises(ValueError):
        LogFilter(mock_gateway, "receipt")
