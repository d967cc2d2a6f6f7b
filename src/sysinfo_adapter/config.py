"""Configuration loading and validation for sysinfo_adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

MEMORY_UNITS = ("MB", "GB")


class ConfigError(ValueError):
    """Configuration values are present but invalid."""


@dataclass
class OtelExporterConfig:
    """OpenTelemetry exporter settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "sysinfo-adapter"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class CollectorConfig:
    """Which sources to publish and how often to poll them."""

    poll_interval_seconds: float = 1.0
    cpu: bool = True
    memory: bool = True
    memory_unit: str = "MB"
    system: bool = True
    battery: bool = True
    disks: bool = True
    network: bool = True


@dataclass
class LocalExporterConfig:
    """Local file exporter settings."""

    enabled: bool = True
    output_dir: str = "./sysinfo_data"


@dataclass
class SysteminfoConfig:
    """Top-level sysinfo_adapter configuration."""

    mode: str = "local"
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    local_exporter: LocalExporterConfig = field(default_factory=LocalExporterConfig)
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using SYSINFO_ prefix."""
    env_map = {
        "SYSINFO_MODE": ("mode",),
        "SYSINFO_POLL_INTERVAL": ("collector", "poll_interval_seconds"),
        "SYSINFO_MEMORY_UNIT": ("collector", "memory_unit"),
        "SYSINFO_OTEL_ENDPOINT": ("otel", "endpoint"),
        "SYSINFO_OTEL_SERVICE_NAME": ("otel", "service_name"),
        "SYSINFO_LOCAL_OUTPUT_DIR": ("local_exporter", "output_dir"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            if final_key == "poll_interval_seconds":
                try:
                    obj[final_key] = float(value)
                except ValueError as exc:
                    raise ConfigError(f"{env_key} must be a number, got {value!r}") from exc
            else:
                obj[final_key] = value
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _validate(cfg: SysteminfoConfig) -> SysteminfoConfig:
    interval = cfg.collector.poll_interval_seconds
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
        raise ConfigError(f"poll_interval_seconds must be a positive number, got {interval!r}")
    if cfg.collector.memory_unit not in MEMORY_UNITS:
        raise ConfigError(
            f"memory_unit must be one of {', '.join(MEMORY_UNITS)}, got {cfg.collector.memory_unit!r}"
        )
    if cfg.mode not in ("local", "online"):
        raise ConfigError(f"mode must be 'local' or 'online', got {cfg.mode!r}")
    return cfg


def _dict_to_config(data: dict[str, Any]) -> SysteminfoConfig:
    """Convert a raw dictionary to a SysteminfoConfig dataclass."""
    collector_data = _section(data, "collector")
    local_data = _section(data, "local_exporter")
    otel_data = _section(data, "otel")

    return SysteminfoConfig(
        mode=data.get("mode", "local"),
        collector=CollectorConfig(**{
            k: v for k, v in collector_data.items()
            if k in CollectorConfig.__dataclass_fields__
        }),
        local_exporter=LocalExporterConfig(**{
            k: v for k, v in local_data.items()
            if k in LocalExporterConfig.__dataclass_fields__
        }),
        otel=OtelExporterConfig(**{
            k: v for k, v in otel_data.items()
            if k in OtelExporterConfig.__dataclass_fields__
        }),
    )


def load_config(path: str | Path | None = None) -> SysteminfoConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``sysinfo.yaml`` in the current directory if *path* is None.

    Raises:
        ConfigError: If a value is present but invalid.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("sysinfo.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _validate(_dict_to_config(data))
