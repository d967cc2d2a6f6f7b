"""Live set of metric sources keyed by stable identity."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator

from .sources.base import MetricSource

logger = logging.getLogger(__name__)

SourceFactory = Callable[[], Awaitable[MetricSource]]


class SourceRegistry:
    """Add-only mapping from identity to :class:`MetricSource`.

    :meth:`upsert` is serialized per identity, so two overlapping
    discoveries of the same new member build it exactly once.
    """

    def __init__(self, on_added: Callable[[MetricSource], None] | None = None) -> None:
        self._sources: dict[str, MetricSource] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._on_added = on_added

    async def upsert(self, identity: str, factory: SourceFactory) -> MetricSource:
        """Return the source registered under *identity*, building it if new.

        A newly built source is announced through ``on_added``.  If
        *factory* raises, nothing is registered and the error propagates.
        """
        existing = self._sources.get(identity)
        if existing is not None:
            return existing

        lock = self._locks.setdefault(identity, asyncio.Lock())
        async with lock:
            existing = self._sources.get(identity)
            if existing is not None:
                return existing

            source = await factory()
            if source.identity != identity:
                logger.error("Factory for %r built a source named %r", identity, source.identity)
            self._sources[identity] = source
            logger.info("Registered source %r (%s)", identity, type(source).__name__)

        if self._on_added is not None:
            self._on_added(source)
        return source

    def get(self, identity: str) -> MetricSource | None:
        return self._sources.get(identity)

    def sources(self) -> list[MetricSource]:
        return list(self._sources.values())

    def __contains__(self, identity: object) -> bool:
        return identity in self._sources

    def __iter__(self) -> Iterator[MetricSource]:
        return iter(list(self._sources.values()))

    def __len__(self) -> int:
        return len(self._sources)
