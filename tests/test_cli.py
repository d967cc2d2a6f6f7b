"""Tests for the command line entry point."""

import json

import pytest
import yaml

from sysinfo_adapter import __version__
from sysinfo_adapter.cli import main


def test_version(capsys):
    main(["version"])
    assert capsys.readouterr().out.strip() == f"sysinfo-adapter {__version__}"


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "sysinfo-adapter" in capsys.readouterr().out


def test_invalid_config_exits(tmp_path, capsys):
    path = tmp_path / "sysinfo.yaml"
    path.write_text(yaml.dump({"collector": {"poll_interval_seconds": 0}}))
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(path), "snapshot"])
    assert exc.value.code == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_snapshot_prints_sources(tmp_path, capsys):
    path = tmp_path / "sysinfo.yaml"
    path.write_text(yaml.dump({"collector": {"disks": False, "network": False, "battery": False}}))
    main(["--config", str(path), "--log-level", "ERROR", "snapshot"])

    snapshot = json.loads(capsys.readouterr().out)
    ids = [entry["id"] for entry in snapshot]
    assert ids == ["cpu", "ram", "system"]
    system = snapshot[-1]
    assert system["values"]["uptime"] > 0
