"""Metrics-source capability: asynchronous host readings.

The core only depends on the :class:`MetricsProvider` protocol.  The
default :class:`PsutilMetricsProvider` reads the host through psutil and
runs every blocking call in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import psutil

from .readings import (
    BatteryReading,
    CpuLoad,
    CpuSpeedLimits,
    FilesystemReading,
    InterfaceInfo,
    InterfaceStats,
    MemoryReading,
)

logger = logging.getLogger(__name__)

_PREFERRED_SENSORS = ("coretemp", "cpu_thermal", "k10temp", "acpitz")


class ReadingUnavailable(RuntimeError):
    """The host cannot provide the requested reading."""


class MetricsProvider(Protocol):
    async def cpu_temperature(self) -> float: ...

    async def cpu_load(self) -> CpuLoad: ...

    async def cpu_speed(self) -> float: ...

    async def cpu_speed_limits(self) -> CpuSpeedLimits: ...

    async def memory(self) -> MemoryReading: ...

    async def filesystems(self) -> list[FilesystemReading]: ...

    async def network_interfaces(self) -> list[InterfaceInfo]: ...

    async def network_stats(self, name: str | None = None) -> list[InterfaceStats]: ...

    async def uptime(self) -> float: ...

    async def battery(self) -> BatteryReading: ...


class PsutilMetricsProvider:
    """Reads host metrics with psutil."""

    def __init__(self) -> None:
        self._prev_counters: dict[str, tuple[float, int, int]] = {}
        # prime cpu_percent so the first real call returns a meaningful value
        psutil.cpu_percent(interval=None)

    async def cpu_temperature(self) -> float:
        return await asyncio.to_thread(self._read_cpu_temperature)

    @staticmethod
    def _read_cpu_temperature() -> float:
        try:
            temps = psutil.sensors_temperatures()
        except AttributeError as exc:
            raise ReadingUnavailable("temperature sensors not supported on this platform") from exc
        for name in _PREFERRED_SENSORS:
            entries = temps.get(name)
            if entries and entries[0].current is not None:
                return float(entries[0].current)
        for entries in temps.values():
            if entries and entries[0].current is not None:
                return float(entries[0].current)
        raise ReadingUnavailable("no CPU temperature sensor found")

    async def cpu_load(self) -> CpuLoad:
        return await asyncio.to_thread(self._read_cpu_load)

    @staticmethod
    def _read_cpu_load() -> CpuLoad:
        current = psutil.cpu_percent(interval=None)
        load1, _load5, _load15 = psutil.getloadavg()
        return CpuLoad(current=float(current), average=float(load1))

    async def cpu_speed(self) -> float:
        freq = await asyncio.to_thread(psutil.cpu_freq)
        if freq is None:
            raise ReadingUnavailable("CPU frequency not reported")
        return freq.current / 1000

    async def cpu_speed_limits(self) -> CpuSpeedLimits:
        freq = await asyncio.to_thread(psutil.cpu_freq)
        if freq is None:
            return CpuSpeedLimits(minimum=None, maximum=None)
        return CpuSpeedLimits(minimum=freq.min / 1000, maximum=freq.max / 1000)

    async def memory(self) -> MemoryReading:
        mem = await asyncio.to_thread(psutil.virtual_memory)
        return MemoryReading(available=mem.available, total=mem.total)

    async def filesystems(self) -> list[FilesystemReading]:
        return await asyncio.to_thread(self._read_filesystems)

    @staticmethod
    def _read_filesystems() -> list[FilesystemReading]:
        readings: list[FilesystemReading] = []
        seen: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if part.mountpoint in seen:
                continue
            seen.add(part.mountpoint)
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as exc:
                logger.debug("Skipping %s: %s", part.mountpoint, exc)
                continue
            readings.append(FilesystemReading(mount=part.mountpoint, size=usage.total, used=usage.used))
        return readings

    async def network_interfaces(self) -> list[InterfaceInfo]:
        stats = await asyncio.to_thread(psutil.net_if_stats)
        return [
            InterfaceInfo(name=name, operstate="up" if st.isup else "down", speed=float(st.speed))
            for name, st in stats.items()
            if name != "lo"
        ]

    async def network_stats(self, name: str | None = None) -> list[InterfaceStats]:
        counters = await asyncio.to_thread(psutil.net_io_counters, pernic=True)
        now = time.monotonic()
        names = [name] if name is not None else [n for n in counters if n != "lo"]

        out: list[InterfaceStats] = []
        for iface in names:
            nio = counters.get(iface)
            if nio is None:
                continue
            rx_sec = tx_sec = None
            prev = self._prev_counters.get(iface)
            if prev is not None:
                prev_time, prev_recv, prev_sent = prev
                dt = now - prev_time
                if dt > 0:
                    rx_sec = max(nio.bytes_recv - prev_recv, 0) / dt
                    tx_sec = max(nio.bytes_sent - prev_sent, 0) / dt
            self._prev_counters[iface] = (now, nio.bytes_recv, nio.bytes_sent)
            out.append(InterfaceStats(
                name=iface,
                rx_bytes=nio.bytes_recv,
                tx_bytes=nio.bytes_sent,
                rx_sec=rx_sec,
                tx_sec=tx_sec,
            ))
        return out

    async def uptime(self) -> float:
        boot = await asyncio.to_thread(psutil.boot_time)
        return max(time.time() - boot, 0.0)

    async def battery(self) -> BatteryReading:
        try:
            battery = await asyncio.to_thread(psutil.sensors_battery)
        except AttributeError as exc:
            raise ReadingUnavailable("battery sensors not supported on this platform") from exc
        if battery is None:
            raise ReadingUnavailable("no battery installed")
        return BatteryReading(percent=float(battery.percent), plugged=battery.power_plugged)
