"""
Exporter Server - Main orchestrator for all services
"""

import logging
from typing import Dict, Optional

import uvicorn

from ..api.main_api import ExporterAPI
from ..config_loader import parse_listen_address
from ..device.client import MystromClient
from ..discovery.manager import MystromDiscovery
from ..metrics.telemetry import ExporterTelemetry
from .scraper import ScrapeOrchestrator

logger = logging.getLogger(__name__)


class ExporterServer:
    """Builds every component explicitly at startup and runs the HTTP server"""

    def __init__(self, config: Dict, client=None, telemetry: Optional[ExporterTelemetry] = None):
        self.config = config

        self.telemetry = telemetry if telemetry is not None else ExporterTelemetry()
        self.client = client if client is not None else MystromClient(config['device']['timeout_seconds'])
        self.scraper = ScrapeOrchestrator(self.client, self.telemetry)

        self.discovery: Optional[MystromDiscovery] = None
        if config['discovery']['enabled']:
            self.discovery = MystromDiscovery(config['discovery'], config['web']['listen_address'], self.telemetry)

        self.api = ExporterAPI(self.config, self.telemetry, self.scraper, self.discovery)
        self.http_server: Optional[uvicorn.Server] = None
        self.running = False
        self.stopped = False

    async def start(self):
        """Start discovery (if enabled) and serve HTTP until asked to stop"""
        logger.info("Starting myStrom exporter...")
        self.stopped = False

        try:
            if self.discovery is not None:
                await self.discovery.start()
                logger.info("Discovery engine initialized")

            self.running = True
            await self._start_api_server()

        except Exception as e:
            logger.error(f"Server startup failed: {e}")
            await self.stop()
            raise

    async def stop(self):
        """Stop discovery and ask the HTTP server to exit"""
        if self.stopped:
            return
        logger.info("Stopping server...")
        self.stopped = True
        self.running = False

        if self.http_server is not None:
            self.http_server.should_exit = True

        if self.discovery is not None:
            await self.discovery.stop()

        logger.info("exiting.")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        host, port = parse_listen_address(self.config['web']['listen_address'])
        config = uvicorn.Config(
            self.api.app,
            host=host or "0.0.0.0",
            port=port,
            log_level="info",
            access_log=False  # We handle our own logging
        )

        self.http_server = uvicorn.Server(config)

        logger.info(f"Listening on address {self.config['web']['listen_address']}")
        if self.discovery is not None:
            logger.info(f"Discovery enabled on udp port {self.discovery.port}")
        else:
            logger.info("Discovery disabled")

        await self.http_server.serve()
