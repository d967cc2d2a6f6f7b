"""Shared fakes for the sysinfo_adapter tests."""

from __future__ import annotations

from typing import Any

import pytest

from sysinfo_adapter.channel import MetricChannel
from sysinfo_adapter.exporter.base import BaseExporter
from sysinfo_adapter.provider import ReadingUnavailable
from sysinfo_adapter.readings import (
    BatteryReading,
    CpuLoad,
    CpuSpeedLimits,
    FilesystemReading,
    InterfaceInfo,
    InterfaceStats,
    MemoryReading,
)
from sysinfo_adapter.sources.base import MetricSource

GB = 1024 ** 3


def _result(value: Any) -> Any:
    if isinstance(value, BaseException):
        raise value
    return value


class FakeProvider:
    """Scripted metrics provider; assign an exception to make a reading fail."""

    def __init__(self) -> None:
        self.temperature: Any = 52.5
        self.load: Any = CpuLoad(current=12.5, average=0.75)
        self.speed: Any = 2.4567
        self.speed_limits: Any = CpuSpeedLimits(minimum=0.8, maximum=4.2)
        self.mem: Any = MemoryReading(available=2 * GB, total=8 * GB)
        self.fs: Any = [FilesystemReading(mount="/", size=100 * GB, used=40 * GB)]
        self.interfaces: Any = [InterfaceInfo(name="eth0", operstate="up", speed=1000.0)]
        self.stats: Any = [
            InterfaceStats(name="eth0", rx_bytes=3 * GB, tx_bytes=GB, rx_sec=125000.0, tx_sec=62500.0),
        ]
        # consumed front to back, the last value repeats
        self.uptimes: list[Any] = [10.0]
        self.battery_reading: Any = ReadingUnavailable("no battery installed")
        self.calls: dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def cpu_temperature(self) -> float:
        self._count("cpu_temperature")
        return _result(self.temperature)

    async def cpu_load(self) -> CpuLoad:
        self._count("cpu_load")
        return _result(self.load)

    async def cpu_speed(self) -> float:
        self._count("cpu_speed")
        return _result(self.speed)

    async def cpu_speed_limits(self) -> CpuSpeedLimits:
        self._count("cpu_speed_limits")
        return _result(self.speed_limits)

    async def memory(self) -> MemoryReading:
        self._count("memory")
        return _result(self.mem)

    async def filesystems(self) -> list[FilesystemReading]:
        self._count("filesystems")
        return _result(self.fs)

    async def network_interfaces(self) -> list[InterfaceInfo]:
        self._count("network_interfaces")
        return _result(self.interfaces)

    async def network_stats(self, name: str | None = None) -> list[InterfaceStats]:
        self._count("network_stats")
        stats = _result(self.stats)
        return [s for s in stats if name is None or s.name == name]

    async def uptime(self) -> float:
        self._count("uptime")
        value = self.uptimes.pop(0) if len(self.uptimes) > 1 else self.uptimes[0]
        return _result(value)

    async def battery(self) -> BatteryReading:
        self._count("battery")
        return _result(self.battery_reading)


class RecordingExporter(BaseExporter):
    """Records announcements and value changes; also usable as a source owner."""

    def __init__(self) -> None:
        self.announced: list[tuple[str, dict[str, Any]]] = []
        self.values: list[tuple[str, str, Any]] = []
        self.closed = False

    def announce_source(self, source: MetricSource) -> None:
        self.announced.append((source.identity, source.describe()))

    def notify_channel_changed(self, channel: MetricChannel) -> None:
        self.values.append((channel.owner.identity, channel.name, channel.cached_value))

    def shutdown(self) -> None:
        self.closed = True

    def announcements_of(self, identity: str) -> list[dict[str, Any]]:
        return [desc for ident, desc in self.announced if ident == identity]

    def values_of(self, identity: str, channel: str) -> list[Any]:
        return [value for ident, name, value in self.values if ident == identity and name == channel]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def recorder() -> RecordingExporter:
    return RecordingExporter()
