"""CPU temperature, load and clock speed."""

from __future__ import annotations

import logging

from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from .base import MetricSource, SourceKind, SourceOwner

logger = logging.getLogger(__name__)


def parse_speed_limits(minimum: object, maximum: object) -> tuple[float, float]:
    """Interpret raw min/max clock speeds in GHz.

    Raises:
        ValueError: If either value is missing, non-positive, or min > max.
    """
    if minimum is None or maximum is None:
        raise ValueError("speed limits not reported")
    low = float(minimum)  # type: ignore[arg-type]
    high = float(maximum)  # type: ignore[arg-type]
    if low <= 0 or high <= 0 or low > high:
        raise ValueError(f"implausible speed limits {low!r}..{high!r}")
    return low, high


class CpuSource(MetricSource):
    """Publishes CPU temperature, load and current clock speed."""

    kind = SourceKind.CPU
    semantic_types = ("MultiLevelSensor", "TemperatureSensor")

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        speed_limits: tuple[float, float] | None = None,
        poll_interval_seconds: float | None = None,
    ) -> None:
        super().__init__(owner, provider, "cpu", "CPU", poll_interval_seconds)

        self._temperature = self.create_channel("cpuTemperature", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="°C",
            title="CPU temperature",
            description="CPU temperature",
            semantic_kind="TemperatureProperty",
        ))
        self._current_load = self.create_channel("currentLoad", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="%",
            title="CPU load",
            description="Current CPU load",
            minimum=0,
            maximum=100,
            semantic_kind="LevelProperty",
        ))
        self._avg_load = self.create_channel("avgLoad", ChannelSchema(
            value_type=ValueType.NUMBER,
            title="Average load",
            description="System load average over the last minute",
        ))

        low, high = speed_limits if speed_limits is not None else (None, None)
        self._speed = self.create_channel("currentSpeed", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="GHz",
            title="CPU speed",
            description="Current CPU clock speed",
            minimum=low,
            maximum=high,
            extensions={"multipleOf": 0.01},
        ))

    @classmethod
    async def create(
        cls,
        owner: SourceOwner,
        provider: MetricsProvider,
        poll_interval_seconds: float | None = None,
    ) -> CpuSource:
        speed_limits: tuple[float, float] | None = None
        try:
            limits = await provider.cpu_speed_limits()
            speed_limits = parse_speed_limits(limits.minimum, limits.maximum)
        except Exception as exc:
            logger.warning("Could not determine CPU speed limits, omitting bounds: %s", exc)
        return cls(owner, provider, speed_limits, poll_interval_seconds)

    async def sample(self) -> None:
        with self.guard("CPU temperature"):
            self._temperature.update(await self._provider.cpu_temperature())

        load = None
        with self.guard("CPU load"):
            load = await self._provider.cpu_load()
        if load is not None:
            with self.guard("current load"):
                self._current_load.update(load.current)
            with self.guard("average load"):
                self._avg_load.update(load.average)

        with self.guard("CPU speed"):
            self._speed.update(round(await self._provider.cpu_speed(), 2))
