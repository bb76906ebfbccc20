"""Log filter - criteria sets, ranges, ordering and offset/limit pagination."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Sequence

from thor_connex.errors import InvalidArgument, InvalidRange
from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.chain import Event, Transfer
from thor_connex.models.filter import (
    CRITERIA_TYPES,
    Criteria,
    FilterKind,
    FilterRange,
    Order,
    RangeUnit,
)

log = logging.getLogger(__name__)


class LogFilter:
    """Searches event or transfer logs on the node.

    Configuration (range, order) may change between apply() calls and only
    affects later calls. Each apply() is one independent round trip: there is
    no cross-call consistency, so block-unit pages can shift if the chain
    reorganizes between calls. Time-unit ranges are more stable.
    """

    def __init__(
        self,
        gateway: NodeGateway,
        kind: FilterKind | str,
        criteria_set: Sequence[Criteria] = (),
        decoder: Callable[[Event], Event] | None = None,
    ) -> None:
        self._gateway = gateway
        self._kind = FilterKind(kind)
        expected = CRITERIA_TYPES[self._kind]
        for criteria in criteria_set:
            if not isinstance(criteria, expected):
                raise InvalidArgument(
                    f"{self._kind.value} filter expects {expected.__name__}, "
                    f"got {type(criteria).__name__}"
                )
        self._criteria_set = list(criteria_set)
        self._decoder = decoder
        self._range = FilterRange()
        self._order = Order.ASC

    @property
    def kind(self) -> FilterKind:
        return self._kind

    @property
    def criteria_set(self) -> list[Criteria]:
        return list(self._criteria_set)

    @property
    def current_range(self) -> FilterRange:
        return self._range

    @property
    def order(self) -> Order:
        return self._order

    def range(
        self,
        range_or_unit: FilterRange | RangeUnit | str,
        from_: int | None = None,
        to: int | None = None,
    ) -> LogFilter:
        """Set the inclusive range. from_ > to is allowed and matches nothing."""
        if isinstance(range_or_unit, FilterRange):
            new_range = replace(range_or_unit, unit=RangeUnit(range_or_unit.unit))
        else:
            if from_ is None or to is None:
                raise InvalidRange("range requires both from_ and to")
            new_range = FilterRange(unit=RangeUnit(range_or_unit), from_=from_, to=to)
        for bound in (new_range.from_, new_range.to):
            if isinstance(bound, bool) or not isinstance(bound, int) or bound < 0:
                raise InvalidRange(f"range bounds must be non-negative ints: {bound!r}")
        self._range = new_range
        return self

    def desc(self) -> LogFilter:
        """Order by (block, tx index, log index) descending."""
        self._order = Order.DESC
        return self

    def asc(self) -> LogFilter:
        self._order = Order.ASC
        return self

    async def apply(self, offset: int = 0, limit: int = 10) -> list[Event] | list[Transfer]:
        """Fetch one page. limit is a maximum; the node may return fewer.

        offset counts in the configured order. Raises InvalidRange when the
        node refuses the page size.
        """
        for name, value in (("offset", offset), ("limit", limit)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidRange(f"{name} must be a non-negative int: {value!r}")

        if self._range.is_empty or limit == 0:
            return []

        logs = await self._gateway.query_logs(
            self._kind, self._criteria_set, self._range, self._order, offset, limit,
        )
        log.debug(
            "%s filter %s..%s (%s) offset=%d limit=%d -> %d logs",
            self._kind.value, self._range.from_, self._range.to,
            self._order.value, offset, limit, len(logs),
        )

        if self._decoder is not None:
            logs = [self._decoder(entry) for entry in logs]
        return logs
