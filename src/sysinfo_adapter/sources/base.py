"""Base interface for metric sources and dynamically-membered domains."""

from __future__ import annotations

import abc
import enum
import functools
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Protocol, TypeVar

from ..channel import ChannelSchema, MetricChannel

if TYPE_CHECKING:
    from ..provider import MetricsProvider
    from ..registry import SourceRegistry

logger = logging.getLogger(__name__)

SCHEMA_CONTEXT = "https://iot.mozilla.org/schemas/"


class SourceKind(str, enum.Enum):
    CPU = "cpu"
    RAM = "ram"
    DISK = "disk"
    NETWORK = "network"
    SYSTEM = "system"
    BATTERY = "battery"


class SourceOwner(Protocol):
    """Publication sink a source reports to."""

    def announce_source(self, source: MetricSource) -> None: ...

    def notify_channel_changed(self, channel: MetricChannel) -> None: ...


class MetricSource(abc.ABC):
    """A logical metric-producing unit owning one or more channels.

    Subclasses build their channels in ``__init__`` (or an async
    ``create`` classmethod when slow-varying parameters must be fetched
    first) and implement :meth:`sample`.
    """

    kind: ClassVar[SourceKind]
    semantic_types: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        identity: str,
        title: str,
        poll_interval_seconds: float | None = None,
    ) -> None:
        self._owner = owner
        self._provider = provider
        self._identity = identity
        self.title = title
        self.poll_interval_seconds = poll_interval_seconds
        self._channels: dict[str, MetricChannel] = {}

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def channels(self) -> list[MetricChannel]:
        return list(self._channels.values())

    def channel(self, name: str) -> MetricChannel | None:
        return self._channels.get(name)

    def create_channel(self, name: str, schema: ChannelSchema) -> MetricChannel:
        """Register a new channel; a duplicate name keeps the existing one."""
        existing = self._channels.get(name)
        if existing is not None:
            logger.error("Channel %r already exists on source %r", name, self._identity)
            return existing
        channel = MetricChannel(self, name, schema)
        self._channels[name] = channel
        return channel

    def set_channel_value(self, name: str, value: Any) -> None:
        channel = self._channels.get(name)
        if channel is None:
            logger.warning("Channel %r not found on source %r", name, self._identity)
            return
        channel.update(value)

    def notify_channel_changed(self, channel: MetricChannel) -> None:
        self._owner.notify_channel_changed(channel)

    def announce(self) -> None:
        """(Re-)register this source and its current schemas with the owner."""
        self._owner.announce_source(self)

    @contextmanager
    def guard(self, what: str) -> Iterator[None]:
        """Log and suppress a failure so sibling readings still publish."""
        try:
            yield
        except Exception as exc:
            logger.warning("%s: failed to update %s: %s", self._identity, what, exc)
            logger.debug("%s: %s failure details", self._identity, what, exc_info=True)

    @abc.abstractmethod
    async def sample(self) -> None:
        """Fetch current readings and update every channel that succeeded."""

    def describe(self) -> dict[str, Any]:
        """Render as a Web Thing description with current channel schemas."""
        return {
            "id": self._identity,
            "title": self.title,
            "@context": SCHEMA_CONTEXT,
            "@type": list(self.semantic_types),
            "properties": {name: ch.schema.to_dict() for name, ch in self._channels.items()},
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._identity!r})"


ItemT = TypeVar("ItemT")


class DiscoveryDomain(abc.ABC, Generic[ItemT]):
    """A family of sources whose membership is re-queried every tick.

    Members are upserted into the shared registry and never removed: a
    member missing from the latest query is still sampled, and simply
    skips its update.
    """

    name: ClassVar[str]

    def __init__(
        self,
        owner: SourceOwner,
        provider: MetricsProvider,
        registry: SourceRegistry,
        poll_interval_seconds: float | None = None,
    ) -> None:
        self._owner = owner
        self._provider = provider
        self._registry = registry
        self.poll_interval_seconds = poll_interval_seconds
        self._members: dict[str, MetricSource] = {}

    @property
    def members(self) -> list[MetricSource]:
        return list(self._members.values())

    async def discover(self) -> list[MetricSource]:
        """Upsert every currently visible member and return all known members."""
        try:
            items = await self.query()
        except Exception as exc:
            logger.warning("Discovery of %s failed: %s", self.name, exc)
            return self.members

        for item in items:
            try:
                identity = self.identity_of(item)
                source = await self._registry.upsert(identity, functools.partial(self.build, item))
            except Exception as exc:
                logger.warning("Skipping %s member %r: %s", self.name, item, exc)
                continue
            self._members.setdefault(identity, source)
            with source.guard(f"{self.name} discovery data"):
                self.refresh(source, item)
        return self.members

    @abc.abstractmethod
    async def query(self) -> list[ItemT]:
        """Return the current membership as reported by the host."""

    @abc.abstractmethod
    def identity_of(self, item: ItemT) -> str:
        """Stable registry key for *item*."""

    @abc.abstractmethod
    async def build(self, item: ItemT) -> MetricSource:
        """Construct the source for a newly seen *item*."""

    def refresh(self, source: MetricSource, item: ItemT) -> None:
        """Apply fresh discovery data to an already registered source."""
