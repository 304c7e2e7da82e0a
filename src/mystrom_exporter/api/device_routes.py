"""
Scrape routes: exporter telemetry and per-device metrics
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
import logging

from ..metrics.registry import render
from ..services.scraper import BadRequestError, ScrapeError

logger = logging.getLogger(__name__)


async def scrape_response(scraper, target: str) -> Response:
    """Scrape target and turn the outcome into an HTTP response"""
    try:
        registry = await scraper.scrape(target)
    except BadRequestError as e:
        return PlainTextResponse(str(e), status_code=400)
    except ScrapeError as e:
        logger.error(str(e))
        return PlainTextResponse(str(e), status_code=500)

    return Response(content=render(registry), media_type=CONTENT_TYPE_LATEST)


def create_device_routes(scraper, telemetry, web_config):
    """Create the metrics and device scrape routes on the configured paths"""
    router = APIRouter(tags=["metrics"])

    async def exporter_metrics():
        """Process and exporter self metrics"""
        return Response(content=render(telemetry.registry), media_type=CONTENT_TYPE_LATEST)

    async def device_metrics(target: str = ""):
        """Metrics of the switch given by the target query parameter"""
        return await scrape_response(scraper, target)

    router.add_api_route(web_config['metrics_path'], exporter_metrics, methods=["GET"])
    router.add_api_route(web_config['device_path'], device_metrics, methods=["GET"])
    return router
