"""Local file exporter – writes announcements and value changes to JSONL files."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..channel import MetricChannel
from ..config import LocalExporterConfig
from ..sources.base import MetricSource
from .base import BaseExporter

logger = logging.getLogger(__name__)


class LocalExporter(BaseExporter):
    """Appends one JSON record per event to a file on disk.

    One file per day is created inside the configured *output_dir*.
    """

    def __init__(self, config: LocalExporterConfig) -> None:
        self._config = config
        self._output_dir = Path(config.output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._fh = None
        self._current_date: str | None = None
        logger.info("LocalExporter initialized → %s", self._output_dir)

    def _ensure_file(self) -> None:
        today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        if self._current_date != today or self._fh is None:
            if self._fh is not None:
                self._fh.close()
            filepath = self._output_dir / f"sysinfo-{today}.jsonl"
            self._fh = open(filepath, "a", encoding="utf-8")  # noqa: SIM115
            self._current_date = today

    def announce_source(self, source: MetricSource) -> None:
        self._write({
            "event": "announce",
            "timestamp": time.time(),
            "source": source.identity,
            "description": source.describe(),
        })

    def notify_channel_changed(self, channel: MetricChannel) -> None:
        self._write({
            "event": "value",
            "timestamp": time.time(),
            "source": channel.owner.identity,
            "channel": channel.name,
            "value": channel.cached_value,
            "unit": channel.schema.unit,
        })

    def _write(self, record: dict[str, Any]) -> None:
        self._ensure_file()
        assert self._fh is not None
        self._fh.write(json.dumps(record) + "\n")
        self._fh.flush()

    def shutdown(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        logger.info("LocalExporter shut down")
