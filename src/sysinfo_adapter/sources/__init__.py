"""Metric source variants.

Each variant owns its channels and knows how to sample them from a
:class:`~sysinfo_adapter.provider.MetricsProvider`.
"""

from __future__ import annotations

from .base import DiscoveryDomain, MetricSource, SourceKind, SourceOwner
from .battery import BatterySource
from .cpu import CpuSource
from .disk import DiskDiscovery, DiskSource
from .memory import RamSource
from .network import NetworkDiscovery, NetworkSource
from .system import SystemSource

__all__ = [
    "BatterySource",
    "CpuSource",
    "DiscoveryDomain",
    "DiskDiscovery",
    "DiskSource",
    "MetricSource",
    "NetworkDiscovery",
    "NetworkSource",
    "RamSource",
    "SourceKind",
    "SourceOwner",
    "SystemSource",
]
