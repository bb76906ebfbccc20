"""Head watcher and tickers - chain progress notifications."""

from __future__ import annotations

import asyncio
import logging

from thor_connex.interfaces.gateway import NodeGateway
from thor_connex.models.chain import HeadSummary

log = logging.getLogger(__name__)


class HeadWatcher:
    """Tracks the chain head from gateway.watch_head() in a background task.

    The watcher task is the only writer of the head. Every head change bumps
    a generation counter and wakes all waiters at once: the current
    asyncio.Event is set and replaced by a fresh one in the same step, so a
    waiter can neither miss a transition nor see one twice.
    """

    def __init__(
        self,
        gateway: NodeGateway,
        backoff: float = 5.0,
        initial_head: HeadSummary | None = None,
    ) -> None:
        self._gateway = gateway
        self._backoff = backoff
        self._head = initial_head
        self._generation = 0
        self._advanced = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def head(self) -> HeadSummary | None:
        return self._head

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ── Lifecycle ─────────────────────────────────────────

    def start(self) -> None:
        """Start watching. Idempotent; needs a running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._watch_loop(), name="thor-head-watcher")
        log.info("Head watcher started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("Head watcher stopped")

    async def _watch_loop(self) -> None:
        while True:
            try:
                async for head in self._gateway.watch_head():
                    self.observe(head)
                log.warning("Head watch stream ended, re-subscribing")
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                log.warning("Head watch failed, retrying in %.1fs: %s", self._backoff, exc)
            await asyncio.sleep(self._backoff)

    # ── State ─────────────────────────────────────────────

    def observe(self, head: HeadSummary) -> bool:
        """Record a head. Returns True if it was a transition."""
        if self._head is None:
            # first sighting is the baseline, not an advance
            self._head = head
            return False
        if head.id == self._head.id:
            return False

        self._head = head
        self._generation += 1
        waking, self._advanced = self._advanced, asyncio.Event()
        waking.set()
        log.debug("Head advanced to #%d %s (gen %d)", head.number, head.id[:18], self._generation)
        return True

    async def wait_past(self, generation: int) -> int:
        """Suspend until the generation exceeds the given one; return the new one."""
        while self._generation <= generation:
            await self._advanced.wait()
        return self._generation


class Ticker:
    """Resolves next() once per head advance since the last resolution.

    next() never raises: watch errors stay inside the HeadWatcher. An advance
    that happens while no next() is pending is latched, so the following
    next() returns at once.
    """

    def __init__(self, watcher: HeadWatcher) -> None:
        self._watcher = watcher
        self._seen = watcher.generation

    async def next(self) -> None:
        reached = await self._watcher.wait_past(self._seen)
        self._seen = max(self._seen, reached)
