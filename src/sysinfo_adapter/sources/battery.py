"""Battery charge level."""

from __future__ import annotations

from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from .base import MetricSource, SourceKind, SourceOwner


class BatterySource(MetricSource):
    kind = SourceKind.BATTERY
    semantic_types = ("MultiLevelSensor",)

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        poll_interval_seconds: float | None = None,
    ) -> None:
        super().__init__(owner, provider, "battery", "Battery", poll_interval_seconds)

        self._level = self.create_channel("batteryLevel", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="%",
            title="Battery level",
            description="Remaining battery charge",
            minimum=0,
            maximum=100,
            semantic_kind="LevelProperty",
        ))
        self._charging = self.create_channel("charging", ChannelSchema(
            value_type=ValueType.BOOLEAN,
            title="Charging",
            description="Whether external power is connected",
            semantic_kind="BooleanProperty",
        ))

    async def sample(self) -> None:
        reading = None
        with self.guard("battery"):
            reading = await self._provider.battery()
        if reading is None:
            return

        with self.guard("battery level"):
            self._level.update(reading.percent)
        if reading.plugged is not None:
            with self.guard("charging state"):
                self._charging.update(reading.plugged)
