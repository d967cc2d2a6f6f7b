"""Host telemetry poller publishing typed, unit-tagged observable values."""

__version__ = "0.3.0"
