"""Base interface for publication exporters."""

from __future__ import annotations

import abc

from ..channel import MetricChannel
from ..sources.base import MetricSource


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive announcements and value changes."""

    @abc.abstractmethod
    def announce_source(self, source: MetricSource) -> None:
        """Register or re-register *source* with its current channel schemas."""

    @abc.abstractmethod
    def notify_channel_changed(self, channel: MetricChannel) -> None:
        """Publish the new cached value of *channel*."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""
