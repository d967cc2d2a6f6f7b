"""Tests for the configuration module."""

import os
import tempfile

import pytest
import yaml

from sysinfo_adapter.config import ConfigError, SysteminfoConfig, load_config


def _write(data):
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        return fh.name


def test_load_config_defaults():
    """Loading from a non-existent file returns defaults."""
    cfg = load_config("/tmp/nonexistent_sysinfo.yaml")
    assert isinstance(cfg, SysteminfoConfig)
    assert cfg.mode == "local"
    assert cfg.collector.poll_interval_seconds == 1.0
    assert cfg.collector.memory_unit == "MB"
    assert cfg.collector.disks is True
    assert cfg.local_exporter.enabled is True
    assert cfg.otel.endpoint == "http://localhost:4318"


def test_load_config_from_yaml():
    path = _write({
        "mode": "online",
        "collector": {
            "poll_interval_seconds": 5,
            "network": False,
            "memory_unit": "GB",
            "unknown_key": 1,
        },
        "otel": {"service_name": "my-host"},
    })
    try:
        cfg = load_config(path)
        assert cfg.mode == "online"
        assert cfg.collector.poll_interval_seconds == 5
        assert cfg.collector.network is False
        assert cfg.collector.memory_unit == "GB"
        assert cfg.otel.service_name == "my-host"
    finally:
        os.unlink(path)


def test_env_override(monkeypatch):
    path = _write({"collector": {"poll_interval_seconds": 5}})
    monkeypatch.setenv("SYSINFO_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("SYSINFO_LOCAL_OUTPUT_DIR", "/var/lib/sysinfo")
    try:
        cfg = load_config(path)
        assert cfg.collector.poll_interval_seconds == 2.5
        assert cfg.local_exporter.output_dir == "/var/lib/sysinfo"
    finally:
        os.unlink(path)


@pytest.mark.parametrize("collector", [
    {"poll_interval_seconds": 0},
    {"poll_interval_seconds": -1},
    {"poll_interval_seconds": "fast"},
    {"memory_unit": "TB"},
])
def test_invalid_values_rejected(collector):
    path = _write({"collector": collector})
    try:
        with pytest.raises(ConfigError):
            load_config(path)
    finally:
        os.unlink(path)


def test_invalid_env_interval(monkeypatch):
    monkeypatch.setenv("SYSINFO_POLL_INTERVAL", "soon")
    with pytest.raises(ConfigError):
        load_config("/tmp/nonexistent_sysinfo.yaml")
