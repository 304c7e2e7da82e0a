"""
myStrom Exporter - Main Entry Point
"""

import argparse
import asyncio
import logging
import os
import platform
import signal
import sys

from . import __version__
from .config_loader import load_config, apply_overrides, setup_logging
from .services.exporter_server import ExporterServer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mystrom-exporter", description="Prometheus exporter for myStrom switches")
    parser.add_argument("--config", default=os.environ.get("CONFIG_FILE"),
                        help="YAML configuration file (env CONFIG_FILE)")
    parser.add_argument("--web.listen-address", dest="listen_address",
                        help="Address to listen on (default :9452)")
    parser.add_argument("--web.metrics-path", dest="metrics_path",
                        help="Path under which to expose exporters own metrics (default /metrics)")
    parser.add_argument("--web.device-path", dest="device_path",
                        help="Path under which the metrics of the devices are fetched (default /device)")
    parser.add_argument("--discovery.enabled", dest="discovery_enabled", action="store_true", default=None,
                        help="Enable the mystrom autodiscovery")
    parser.add_argument("--log.level", dest="log_level", help="Log level (default INFO)")
    parser.add_argument("--version", action="store_true", help="Show version information.")
    return parser


def version_banner() -> str:
    return (f"mystrom_exporter, version {__version__}\n"
            f"  python version: {platform.python_version()} ({platform.python_implementation()})\n"
            f"  platform: {platform.system().lower()}/{platform.machine()}")


def load_runtime_config(args: argparse.Namespace):
    """Config file (or defaults) with command line flags applied on top"""
    config = load_config(args.config)
    return apply_overrides(config, {
        "web.listen_address": args.listen_address,
        "web.metrics_path": args.metrics_path,
        "web.device_path": args.device_path,
        "discovery.enabled": args.discovery_enabled,
        "logging.level": args.log_level.upper() if args.log_level else None,
    })


async def main(config) -> int:
    """Run the exporter until interrupted"""
    server = None

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        if server:
            asyncio.create_task(server.stop())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server = ExporterServer(config)
        await server.start()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Server failed: {e}")
        return 1
    finally:
        if server:
            await server.stop()

    return 0


def run(argv=None) -> None:
    args = build_parser().parse_args(argv)

    if args.version:
        print(version_banner())
        sys.exit(0)

    try:
        config = load_runtime_config(args)
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)
    setup_logging(config)

    try:
        exit_code = asyncio.run(main(config))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nExporter stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    run()
