"""OpenTelemetry exporter – pushes channel values via OTLP/HTTP."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from .. import units
from ..channel import MetricChannel
from ..config import OtelExporterConfig
from ..sources.base import MetricSource
from .base import BaseExporter

logger = logging.getLogger(__name__)


def gauge_name(channel: MetricChannel) -> str:
    """Instrument name for *channel*.

    Time-denominated channels may be rebound to another unit, so the unit is
    part of their name; one instrument name never carries two units.
    """
    unit = channel.schema.unit
    if unit in units.UNITS:
        return f"sysinfo.{channel.name}.{unit}"
    return f"sysinfo.{channel.name}"


class OtelExporter(BaseExporter):
    """Records every channel update as an OpenTelemetry gauge observation.

    The SDK's ``PeriodicExportingMetricReader`` flushes the gauges to the
    configured OTLP/HTTP endpoint.  Gauges are keyed by name, so a
    time-denominated channel rebound to a new unit reports through a new,
    unit-qualified instrument.
    """

    def __init__(self, config: OtelExporterConfig, reader: MetricReader | None = None) -> None:
        self._config = config
        resource = Resource.create({SERVICE_NAME: config.service_name})

        if reader is None:
            exporter_kwargs: dict[str, Any] = {
                "endpoint": f"{config.endpoint.rstrip('/')}/v1/metrics",
            }
            if config.headers:
                exporter_kwargs["headers"] = config.headers
            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(**exporter_kwargs),
                export_interval_millis=config.export_interval_ms,
            )
        self._provider = MeterProvider(resource=resource, metric_readers=[reader])
        metrics.set_meter_provider(self._provider)
        self._meter = self._provider.get_meter("sysinfo_adapter")
        self._gauges: dict[str, Any] = {}

        logger.info(
            "OtelExporter initialized → %s (service=%s)",
            config.endpoint,
            config.service_name,
        )

    def _get_gauge(self, channel: MetricChannel) -> Any:
        schema = channel.schema
        name = gauge_name(channel)
        if name not in self._gauges:
            self._gauges[name] = self._meter.create_gauge(
                name=name,
                unit=schema.unit or "1",
                description=schema.description,
            )
        return self._gauges[name]

    def announce_source(self, source: MetricSource) -> None:
        logger.debug("Source %r announced with %d channels", source.identity, len(source.channels))

    def notify_channel_changed(self, channel: MetricChannel) -> None:
        value = channel.cached_value
        if value is None:
            return
        self._get_gauge(channel).set(float(value), attributes={"source": channel.owner.identity})

    def shutdown(self) -> None:
        self._provider.shutdown()
        logger.info("OtelExporter shut down")
