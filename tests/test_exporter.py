"""Tests for the publication exporters."""

import asyncio
import json

from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from sysinfo_adapter.config import LocalExporterConfig, OtelExporterConfig
from sysinfo_adapter.exporter.local import LocalExporter
from sysinfo_adapter.exporter.otel import OtelExporter, gauge_name
from sysinfo_adapter.sources.cpu import CpuSource
from sysinfo_adapter.sources.system import SystemSource


def test_local_exporter_writes_jsonl(tmp_path, provider):
    exporter = LocalExporter(LocalExporterConfig(output_dir=str(tmp_path)))
    provider.uptimes = [120]
    system = SystemSource(exporter, provider)

    exporter.announce_source(system)
    asyncio.run(system.sample())
    exporter.shutdown()

    files = list(tmp_path.glob("sysinfo-*.jsonl"))
    assert len(files) == 1
    records = [json.loads(line) for line in files[0].read_text().splitlines()]

    assert [r["event"] for r in records] == ["announce", "announce", "value", "value"]
    assert records[0]["description"]["properties"]["uptimeScaled"]["unit"] == "s"
    assert records[1]["description"]["properties"]["uptimeScaled"]["unit"] == "m"
    assert records[2] == {
        "event": "value",
        "timestamp": records[2]["timestamp"],
        "source": "system",
        "channel": "uptimeScaled",
        "value": 2.0,
        "unit": "m",
    }
    assert records[3]["channel"] == "uptime"
    assert records[3]["value"] == 120


def test_otel_exporter_records_gauges(provider):
    reader = InMemoryMetricReader()
    exporter = OtelExporter(OtelExporterConfig(), reader=reader)
    provider.uptimes = [30, 90]
    system = SystemSource(exporter, provider)

    asyncio.run(system.sample())
    asyncio.run(system.sample())

    data = reader.get_metrics_data()
    seen = {
        (metric.name, metric.unit)
        for resource_metrics in data.resource_metrics
        for scope_metrics in resource_metrics.scope_metrics
        for metric in scope_metrics.metrics
    }
    exporter.shutdown()

    assert ("sysinfo.uptime.s", "s") in seen
    assert ("sysinfo.uptimeScaled.s", "s") in seen
    assert ("sysinfo.uptimeScaled.m", "m") in seen
    assert len({name for name, _ in seen}) == len(seen)


def test_gauge_names_qualify_time_units(recorder, provider):
    system = SystemSource(recorder, provider)
    cpu_temperature = CpuSource(recorder, provider).channel("cpuTemperature")

    assert gauge_name(system.channel("uptimeScaled")) == "sysinfo.uptimeScaled.s"
    assert gauge_name(cpu_temperature) == "sysinfo.cpuTemperature"
