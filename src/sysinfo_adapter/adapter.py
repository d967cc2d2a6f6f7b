"""Composition root binding sources, registry, scheduler and exporters."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any

from .channel import MetricChannel
from .config import CollectorConfig
from .exporter.base import BaseExporter
from .provider import MetricsProvider, PsutilMetricsProvider, ReadingUnavailable
from .registry import SourceFactory, SourceRegistry
from .scheduler import PollScheduler
from .sources import (
    BatterySource,
    CpuSource,
    DiskDiscovery,
    MetricSource,
    NetworkDiscovery,
    RamSource,
    SystemSource,
)

logger = logging.getLogger(__name__)


class SysteminfoAdapter:
    """Publishes host metrics to a set of exporters.

    Instantiate it with a :class:`CollectorConfig`, register exporters via
    :meth:`add_exporter`, then either drive it with :meth:`run` or take
    single samples with :meth:`poll_once`.  The adapter is the owner every
    source reports to: announcements and value changes fan out to all
    exporters, and a failing exporter never affects the others.
    """

    def __init__(self, config: CollectorConfig, provider: MetricsProvider | None = None) -> None:
        self._config = config
        self._provider: MetricsProvider = provider if provider is not None else PsutilMetricsProvider()
        self._exporters: list[BaseExporter] = []
        self.registry = SourceRegistry(on_added=self.announce_source)
        self.scheduler = PollScheduler(config.poll_interval_seconds)
        self._set_up = False

    def add_exporter(self, exporter: BaseExporter) -> None:
        """Register an exporter to receive announcements and value changes."""
        self._exporters.append(exporter)

    def announce_source(self, source: MetricSource) -> None:
        for exporter in self._exporters:
            try:
                exporter.announce_source(source)
            except Exception:
                logger.exception("Exporter %s failed to announce %r", type(exporter).__name__, source.identity)

    def notify_channel_changed(self, channel: MetricChannel) -> None:
        for exporter in self._exporters:
            try:
                exporter.notify_channel_changed(channel)
            except Exception:
                logger.exception(
                    "Exporter %s failed to publish %s/%s",
                    type(exporter).__name__,
                    channel.owner.identity,
                    channel.name,
                )

    async def setup(self) -> None:
        """Create the fixed sources and discovery domains enabled in config."""
        if self._set_up:
            return
        self._set_up = True
        cfg = self._config
        provider = self._provider

        if cfg.cpu:
            await self._add_source("cpu", functools.partial(CpuSource.create, self, provider))
        if cfg.memory:
            await self._add_source("ram", functools.partial(RamSource.create, self, provider, cfg.memory_unit))
        if cfg.system:
            await self._add_source("system", functools.partial(self._build, SystemSource))
        if cfg.battery:
            if await self._has_battery():
                await self._add_source("battery", functools.partial(self._build, BatterySource))
            else:
                logger.info("No battery found, battery source disabled")
        if cfg.disks:
            self.scheduler.add_discovery(DiskDiscovery(self, provider, self.registry))
        if cfg.network:
            self.scheduler.add_discovery(NetworkDiscovery(self, provider, self.registry))

    async def _build(self, source_type: type[MetricSource]) -> MetricSource:
        return source_type(self, self._provider)  # type: ignore[call-arg]

    async def _has_battery(self) -> bool:
        try:
            await self._provider.battery()
        except ReadingUnavailable:
            return False
        except Exception as exc:
            logger.warning("Battery check failed: %s", exc)
            return False
        return True

    async def _add_source(self, identity: str, factory: SourceFactory) -> None:
        try:
            source = await self.registry.upsert(identity, factory)
        except Exception:
            logger.exception("Could not set up source %r", identity)
            return
        self.scheduler.schedule(source)

    async def poll_once(self) -> None:
        """Run a single scheduler tick (setting up on first use)."""
        await self.setup()
        await self.scheduler.tick()

    async def run(self, stop: asyncio.Event) -> None:
        """Poll until *stop* is set."""
        await self.setup()
        await self.scheduler.run(stop)

    def snapshot(self) -> list[dict[str, Any]]:
        """Describe every registered source together with its cached values."""
        return [
            {
                **source.describe(),
                "kind": source.kind.value,
                "values": {channel.name: channel.cached_value for channel in source.channels},
            }
            for source in self.registry
        ]

    def shutdown(self) -> None:
        for exporter in self._exporters:
            try:
                exporter.shutdown()
            except Exception:
                logger.exception("Exporter %s failed to shut down", type(exporter).__name__)
