"""
Main FastAPI application setup
"""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from typing import Dict, Optional
import logging

from .. import __version__
from .device_routes import create_device_routes
from .discovery_routes import create_discovery_routes

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head>
	<title>myStrom switch report Exporter</title>
	<style>
		label{{
		display:inline-block;
		width:75px;
		}}
		form label {{
		margin: 10px;
		}}
		form input {{
		margin: 10px;
		}}
	</style>
</head>
<body>
<h1>myStrom Exporter</h1>
<form action="{device_path}">
	<label>Target:</label> <input type="text" name="target" placeholder="X.X.X.X" value="1.2.3.4"><br>
	<input type="submit" value="Submit">
</form>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>"""


class DiscoveryHealth(BaseModel):
    enabled: bool
    state: Optional[str] = None
    devices: int = 0


class HealthResponse(BaseModel):
    status: str
    version: str
    discovery: DiscoveryHealth


class ExporterAPI:
    """HTTP surface of the exporter: telemetry, device scrapes and discovery"""

    def __init__(self, config: Dict, telemetry, scraper, discovery=None):
        self.config = config
        self.telemetry = telemetry
        self.scraper = scraper
        self.discovery = discovery
        self.app = FastAPI(
            title="myStrom Exporter",
            description="Prometheus exporter for myStrom WiFi switches with UDP discovery",
            version=__version__
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        web = self.config['web']

        self.app.include_router(create_device_routes(self.scraper, self.telemetry, web))
        if self.discovery is not None:
            self.app.include_router(create_discovery_routes(self.discovery, self.scraper))

        landing_page = LANDING_PAGE.format(device_path=web['device_path'], metrics_path=web['metrics_path'])

        @self.app.get("/", response_class=HTMLResponse, include_in_schema=False)
        async def index():
            return landing_page

        @self.app.get("/health", response_model=HealthResponse)
        async def health():
            """Exporter health check"""
            if self.discovery is None:
                discovery_health = DiscoveryHealth(enabled=False)
            else:
                discovery_health = DiscoveryHealth(
                    enabled=True,
                    state=self.discovery.state.value,
                    devices=len(self.discovery.table)
                )
            return HealthResponse(status="healthy", version=__version__, discovery=discovery_health)
