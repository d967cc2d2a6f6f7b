"""Available memory."""

from __future__ import annotations

from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from .base import MetricSource, SourceKind, SourceOwner

MEMORY_UNITS: dict[str, int] = {
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
}


def bytes_to_unit(value: float, unit: str) -> float:
    """Convert a byte count to ``"MB"`` or ``"GB"`` (binary multiples)."""
    return value / MEMORY_UNITS[unit]


class RamSource(MetricSource):
    """Publishes available memory in MB or GB, bounded by installed memory."""

    kind = SourceKind.RAM
    semantic_types = ("MultiLevelSensor",)

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        total_bytes: int,
        unit: str = "MB",
        poll_interval_seconds: float | None = None,
    ) -> None:
        if unit not in MEMORY_UNITS:
            raise ValueError(f"unsupported memory unit {unit!r}")
        super().__init__(owner, provider, "ram", "RAM", poll_interval_seconds)
        self._unit = unit
        self._total_bytes = total_bytes

        self._available = self.create_channel("memAvailable", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit=unit,
            title="Available memory",
            description="Available memory",
            minimum=0,
            maximum=bytes_to_unit(total_bytes, unit),
            semantic_kind="LevelProperty",
        ))
        self._usage = self.create_channel("memUsage", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="%",
            title="Memory usage",
            description="Share of installed memory in use",
            minimum=0,
            maximum=100,
            semantic_kind="LevelProperty",
        ))

    @classmethod
    async def create(
        cls,
        owner: SourceOwner,
        provider: MetricsProvider,
        unit: str = "MB",
        poll_interval_seconds: float | None = None,
    ) -> RamSource:
        reading = await provider.memory()
        return cls(owner, provider, reading.total, unit, poll_interval_seconds)

    async def sample(self) -> None:
        reading = None
        with self.guard("memory"):
            reading = await self._provider.memory()
        if reading is None:
            return

        with self.guard("available memory"):
            self._available.update(bytes_to_unit(reading.available, self._unit))
        with self.guard("memory usage"):
            self._usage.update((self._total_bytes - reading.available) / self._total_bytes * 100)
