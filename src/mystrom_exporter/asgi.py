"""
ASGI entry point for uvicorn
This module exposes the FastAPI app for use with uvicorn command line:

    CONFIG_FILE=config/config.yaml uvicorn mystrom_exporter.asgi:app --port 9452
"""

import logging
import os

from .config_loader import load_config, setup_logging
from .services.exporter_server import ExporterServer

# Load configuration
config = load_config(os.environ.get('CONFIG_FILE'))
setup_logging(config)

logger = logging.getLogger(__name__)

# Components are built here, uvicorn owns the HTTP server
exporter = ExporterServer(config)

app = exporter.api.app


@app.on_event("startup")
async def startup_event():
    """Start discovery on startup"""
    if exporter.discovery is not None:
        await exporter.discovery.start()
        logger.info("Discovery engine initialized")


@app.on_event("shutdown")
async def shutdown_event():
    """Close the discovery socket on shutdown"""
    await exporter.stop()
    logger.info("Application shut down complete")


logger.info("ASGI app ready for uvicorn")
