"""Periodic sampling and discovery driven by a single tick."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from .sources.base import DiscoveryDomain, MetricSource

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    target: Union[MetricSource, DiscoveryDomain]
    interval: float
    next_due: float | None = None

    def due(self, now: float) -> bool:
        return self.next_due is None or now >= self.next_due


class PollScheduler:
    """Samples registered sources and discovery domains on a fixed cadence.

    Every :meth:`tick` launches the work that is due and not still running
    from an earlier tick.  Sources keep their own cadence (a multiple of
    the tick is sensible); a sample that overruns simply causes that source
    to be skipped until it settles.  Nothing is ever cancelled.
    """

    def __init__(self, interval_seconds: float = 1.0) -> None:
        self.interval_seconds = interval_seconds
        self._sources: list[_Entry] = []
        self._domains: list[_Entry] = []
        self._in_flight: set[object] = set()
        self._tick_tasks: set[asyncio.Task[None]] = set()

    def schedule(self, source: MetricSource, interval_seconds: float | None = None) -> None:
        """Sample *source* every *interval_seconds* (default: its own, then the tick)."""
        interval = interval_seconds or source.poll_interval_seconds or self.interval_seconds
        self._sources.append(_Entry(source, interval))

    def add_discovery(self, domain: DiscoveryDomain, interval_seconds: float | None = None) -> None:
        """Re-discover and sample *domain* every *interval_seconds*."""
        interval = interval_seconds or domain.poll_interval_seconds or self.interval_seconds
        self._domains.append(_Entry(domain, interval))

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def tick(self, now: float | None = None) -> None:
        """Launch all due work and wait for this tick's share of it."""
        if now is None:
            now = asyncio.get_running_loop().time()

        work = []
        for entry in self._sources:
            if entry.due(now):
                entry.next_due = now + entry.interval
                work.append(self._sample(entry.target))
        for entry in self._domains:
            if entry.due(now):
                entry.next_due = now + entry.interval
                work.append(self._discover(entry.target))
        if work:
            await asyncio.gather(*work)

    async def _sample(self, source: MetricSource) -> None:
        if source in self._in_flight:
            logger.debug("Previous sample of %r still running, skipping", source.identity)
            return
        self._in_flight.add(source)
        try:
            await source.sample()
        except Exception:
            logger.exception("Sampling %r failed", source.identity)
        finally:
            self._in_flight.discard(source)

    async def _discover(self, domain: DiscoveryDomain) -> None:
        if domain in self._in_flight:
            logger.debug("Previous discovery of %s still running, skipping", domain.name)
            return
        self._in_flight.add(domain)
        try:
            members = await domain.discover()
        except Exception:
            logger.exception("Discovery of %s failed", domain.name)
            members = domain.members
        finally:
            self._in_flight.discard(domain)
        await asyncio.gather(*(self._sample(source) for source in members))

    def _launch_tick(self) -> None:
        task = asyncio.create_task(self.tick())
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def run(self, stop: asyncio.Event) -> None:
        """Tick every ``interval_seconds`` until *stop* is set.

        Ticks are not awaited before the next one fires; outstanding ticks
        are allowed to finish once *stop* is set.
        """
        logger.info("PollScheduler started (interval=%.1fs)", self.interval_seconds)
        while not stop.is_set():
            self._launch_tick()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
        if self._tick_tasks:
            await asyncio.gather(*self._tick_tasks, return_exceptions=True)
        logger.info("PollScheduler stopped")
