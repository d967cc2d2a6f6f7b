"""System uptime, raw and in an adaptive display unit."""

from __future__ import annotations

import logging

from .. import units
from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from ..units import TimeUnit
from .base import MetricSource, SourceKind, SourceOwner

logger = logging.getLogger(__name__)

# upper bound of the scaled uptime channel: one year
MAX_UPTIME_SECONDS = 365 * 24 * 3600


def scaled_uptime_schema(unit: TimeUnit) -> ChannelSchema:
    return ChannelSchema(
        value_type=ValueType.NUMBER,
        unit=unit,
        title="Uptime",
        description="Time since start of the system",
        minimum=0,
        maximum=units.convert(MAX_UPTIME_SECONDS, unit),
    )


class SystemSource(MetricSource):
    """Publishes system uptime.

    ``uptime`` always carries raw seconds.  ``uptimeScaled`` is expressed
    in the coarsest sensible unit; whenever a sample calls for a different
    unit than the current one, the channel is rebound to the new unit and
    bounds and the source is re-announced before the value is published.
    """

    kind = SourceKind.SYSTEM

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        poll_interval_seconds: float | None = None,
    ) -> None:
        super().__init__(owner, provider, "system", "System", poll_interval_seconds)
        self.unit: TimeUnit = units.DEFAULT_UNIT

        self._uptime = self.create_channel("uptime", ChannelSchema(
            value_type=ValueType.INTEGER,
            unit="s",
            title="Uptime (seconds)",
            description="Seconds since start of the system",
            minimum=0,
        ))
        self._uptime_scaled = self.create_channel("uptimeScaled", scaled_uptime_schema(self.unit))

    async def sample(self) -> None:
        uptime = None
        with self.guard("uptime"):
            uptime = await self._provider.uptime()
        if uptime is None:
            return

        with self.guard("scaled uptime"):
            next_unit = units.pick_unit(uptime)
            if next_unit != self.unit:
                logger.info("Uptime unit changed from %s to %s", self.unit, next_unit)
                self._uptime_scaled.rebind(scaled_uptime_schema(next_unit))
                self.unit = next_unit
                self.announce()
            self._uptime_scaled.update(units.convert(uptime, self.unit))

        with self.guard("uptime"):
            self._uptime.update(uptime)
