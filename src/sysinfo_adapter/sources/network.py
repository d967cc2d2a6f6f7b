"""Per-interface network throughput and traffic counters."""

from __future__ import annotations

import logging

from ..channel import ChannelSchema, ValueType
from ..provider import MetricsProvider
from ..readings import InterfaceInfo
from .base import DiscoveryDomain, MetricSource, SourceKind, SourceOwner

logger = logging.getLogger(__name__)

DEFAULT_LINK_SPEED = 1000.0
GIGABYTE = 1024 ** 3


def bytes_per_second_to_mbit(rate: float) -> float:
    return rate * 8 / 1024 ** 2


def bytes_to_gigabytes(value: float) -> float:
    return value / GIGABYTE


def link_speed(reported: float) -> float:
    """Nominal link speed in Mbit/s, falling back for unknown-speed links."""
    return reported if reported > 0 else DEFAULT_LINK_SPEED


class NetworkSource(MetricSource):
    """Publishes link state, current throughput and byte counters of one NIC."""

    kind = SourceKind.NETWORK
    semantic_types = ("MultiLevelSensor",)

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        interface: str,
        speed: float,
        poll_interval_seconds: float | None = None,
    ) -> None:
        super().__init__(owner, provider, interface, f"Network {interface}", poll_interval_seconds)
        self.interface = interface
        max_speed = link_speed(speed)

        self._connected = self.create_channel("connected", ChannelSchema(
            value_type=ValueType.BOOLEAN,
            title="Connected",
            description=f"Whether {interface} is up",
            semantic_kind="BooleanProperty",
        ))
        self._rx_speed = self.create_channel("currentRxSpeed", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="Mbit/s",
            title="Receive speed",
            description=f"Current receive speed of {interface}",
            minimum=0,
            maximum=max_speed,
            semantic_kind="LevelProperty",
        ))
        self._tx_speed = self.create_channel("currentTxSpeed", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="Mbit/s",
            title="Transmit speed",
            description=f"Current transmit speed of {interface}",
            minimum=0,
            maximum=max_speed,
            semantic_kind="LevelProperty",
        ))
        self._rx_bytes = self.create_channel("rxBytes", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="GB",
            title="Received",
            description=f"Data received on {interface}",
        ))
        self._tx_bytes = self.create_channel("txBytes", ChannelSchema(
            value_type=ValueType.NUMBER,
            unit="GB",
            title="Transmitted",
            description=f"Data transmitted on {interface}",
        ))

    def refresh(self, info: InterfaceInfo) -> None:
        """Apply discovery data: link state and, if changed, the speed bound."""
        self._connected.update(info.operstate == "up")

        max_speed = link_speed(info.speed)
        if self._rx_speed.schema.maximum == max_speed:
            return
        logger.info("Link speed of %s changed to %s Mbit/s", self.interface, max_speed)
        for channel in (self._rx_speed, self._tx_speed):
            channel.rebind(channel.schema.replace(maximum=max_speed))
        self.announce()

    async def sample(self) -> None:
        stats = None
        with self.guard("network stats"):
            all_stats = await self._provider.network_stats(self.interface)
            stats = next((s for s in all_stats if s.name == self.interface), None)
        if stats is None:
            logger.debug("Interface %s not currently reported, keeping last values", self.interface)
            return

        if stats.rx_sec is not None:
            with self.guard("receive speed"):
                self._rx_speed.update(bytes_per_second_to_mbit(stats.rx_sec))
        if stats.tx_sec is not None:
            with self.guard("transmit speed"):
                self._tx_speed.update(bytes_per_second_to_mbit(stats.tx_sec))
        with self.guard("received bytes"):
            self._rx_bytes.update(bytes_to_gigabytes(stats.rx_bytes))
        with self.guard("transmitted bytes"):
            self._tx_bytes.update(bytes_to_gigabytes(stats.tx_bytes))


class NetworkDiscovery(DiscoveryDomain[InterfaceInfo]):
    """Finds network interfaces, one :class:`NetworkSource` per interface name."""

    name = "network"

    async def query(self) -> list[InterfaceInfo]:
        return await self._provider.network_interfaces()

    def identity_of(self, item: InterfaceInfo) -> str:
        return item.name

    async def build(self, item: InterfaceInfo) -> NetworkSource:
        return NetworkSource(self._owner, self._provider, item.name, item.speed, self.poll_interval_seconds)

    def refresh(self, source: MetricSource, item: InterfaceInfo) -> None:
        if isinstance(source, NetworkSource):
            source.refresh(item)
