"""Per-mount filesystem capacity."""

from __future__ import annotations

import logging

from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from ..readings import FilesystemReading
from .base import DiscoveryDomain, MetricSource, SourceKind, SourceOwner

logger = logging.getLogger(__name__)

GIGABYTE = 1024 ** 3


def available_gigabytes(size: int, used: int) -> float:
    return (size - used) / GIGABYTE


class DiskSource(MetricSource):
    """Publishes free space and usage of a single mount point."""

    kind = SourceKind.DISK
    semantic_types = ("MultiLevelSensor",)

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        mount: str,
        size: int,
        poll_interval_seconds: float | None = None,
    ) -> None:
        super().__init__(owner, provider, mount, f"Disk {mount}", poll_interval_seconds)
        self.mount = mount

        self._available = self.create_channel("available", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="GB",
            title="Available space",
            description=f"Free space on {mount}",
            minimum=0,
            maximum=size / GIGABYTE,
            semantic_kind="LevelProperty",
        ))
        self._usage = self.create_channel("usage", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="%",
            title="Disk usage",
            description=f"Share of {mount} in use",
            minimum=0,
            maximum=100,
            semantic_kind="LevelProperty",
        ))

    async def sample(self) -> None:
        reading = None
        with self.guard("filesystems"):
            filesystems = await self._provider.filesystems()
            reading = next((fs for fs in filesystems if fs.mount == self.mount), None)
        if reading is None:
            logger.debug("Mount %s not currently reported, keeping last values", self.mount)
            return

        with self.guard("available space"):
            self._available.update(available_gigabytes(reading.size, reading.used))
        with self.guard("disk usage"):
            self._usage.update(reading.used / reading.size * 100 if reading.size else 0)


class DiskDiscovery(DiscoveryDomain[FilesystemReading]):
    """Finds mounted filesystems, one :class:`DiskSource` per mount path."""

    name = "disks"

    async def query(self) -> list[FilesystemReading]:
        return await self._provider.filesystems()

    def identity_of(self, item: FilesystemReading) -> str:
        return item.mount

    async def build(self, item: FilesystemReading) -> DiskSource:
        return DiskSource(self._owner, self._provider, item.mount, item.size, self.poll_interval_seconds)
