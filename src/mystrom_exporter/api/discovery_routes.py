"""
Discovery routes: http_sd manifest and scraping by mac address
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
import logging

from ..discovery.models import ManifestError
from .device_routes import scrape_response

logger = logging.getLogger(__name__)


def create_discovery_routes(discovery, scraper):
    """Create routes backed by the discovered device table"""
    router = APIRouter(tags=["discovery"])

    @router.get("/device_by_mac/{macaddr}")
    async def device_by_mac(macaddr: str):
        """Scrape the switch last seen with this mac address"""
        target = discovery.lookup(macaddr)
        if not target:
            return PlainTextResponse(f"no device known with mac address '{macaddr}'", status_code=404)
        return await scrape_response(scraper, target)

    @router.get("/discover")
    async def discover(request: Request):
        """Manifest of all discovered switches for Prometheus http_sd_configs"""
        logger.info(f"got discover request from '{request.client.host if request.client else ''}' for {request.url}")
        try:
            data = discovery.manifest()
        except ManifestError as e:
            logger.error(str(e))
            return Response(status_code=500)
        return Response(content=data, media_type="application/json")

    return router
