"""CLI interface for sysinfo_adapter."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys

from . import __version__
from .config import ConfigError, SysteminfoConfig, load_config


def _build_adapter(cfg: SysteminfoConfig):
    from .adapter import SysteminfoAdapter
    from .exporter.local import LocalExporter

    adapter = SysteminfoAdapter(cfg.collector)

    if cfg.local_exporter.enabled:
        adapter.add_exporter(LocalExporter(cfg.local_exporter))

    if cfg.mode == "online":
        from .exporter.otel import OtelExporter
        adapter.add_exporter(OtelExporter(cfg.otel))

    return adapter


async def _run(cfg: SysteminfoConfig) -> None:
    adapter = _build_adapter(cfg)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda _sig, _frame: loop.call_soon_threadsafe(stop.set))

    print(f"sysinfo-adapter running (mode={cfg.mode}, interval={cfg.collector.poll_interval_seconds}s)")
    print("Press Ctrl+C to stop.\n")
    try:
        await adapter.run(stop)
    finally:
        adapter.shutdown()
    print("\nPolling stopped.")


def _cmd_run(args: argparse.Namespace) -> None:
    """Poll the host and publish until interrupted."""
    cfg = load_config(args.config)
    asyncio.run(_run(cfg))


async def _snapshot(cfg: SysteminfoConfig) -> list[dict]:
    from .adapter import SysteminfoAdapter

    adapter = SysteminfoAdapter(cfg.collector)
    try:
        await adapter.poll_once()
        return adapter.snapshot()
    finally:
        adapter.shutdown()


def _cmd_snapshot(args: argparse.Namespace) -> None:
    """Sample every source once and print descriptions and values as JSON."""
    cfg = load_config(args.config)
    snapshot = asyncio.run(_snapshot(cfg))
    print(json.dumps(snapshot, indent=2, ensure_ascii=False))


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"sysinfo-adapter {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the sysinfo-adapter CLI."""
    parser = argparse.ArgumentParser(
        prog="sysinfo-adapter",
        description="Poll host metrics and publish them as typed observable values",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to sysinfo.yaml")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Poll and publish until interrupted")
    run_p.set_defaults(func=_cmd_run)

    snap_p = sub.add_parser("snapshot", help="Sample once and print all sources as JSON")
    snap_p.set_defaults(func=_cmd_snapshot)

    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
