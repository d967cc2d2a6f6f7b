"""Typed readings returned by a metrics provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CpuLoad:
    current: float
    average: float


@dataclass(frozen=True)
class CpuSpeedLimits:
    # raw values as reported by the host; may be missing or unparseable
    minimum: Any
    maximum: Any


@dataclass(frozen=True)
class MemoryReading:
    available: int
    total: int


@dataclass(frozen=True)
class FilesystemReading:
    mount: str
    size: int
    used: int


@dataclass(frozen=True)
class InterfaceInfo:
    name: str
    operstate: str
    speed: float


@dataclass(frozen=True)
class InterfaceStats:
    name: str
    rx_bytes: int
    tx_bytes: int
    rx_sec: float | None
    tx_sec: float | None


@dataclass(frozen=True)
class BatteryReading:
    percent: float
    plugged: bool | None
