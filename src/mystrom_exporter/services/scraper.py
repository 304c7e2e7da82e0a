"""
Scrape orchestration: one device fetch per request, classified outcome, counters updated
"""

import logging
import time
from enum import Enum

from prometheus_client import CollectorRegistry

from ..device.models import DeviceFetchError, FetchErrorKind
from ..metrics.registry import build_device_registry
from ..metrics.telemetry import ExporterTelemetry

logger = logging.getLogger(__name__)


class ScrapeStatus(str, Enum):
    """Outcome of a scrape, used as the status label value"""
    OK = "ok"
    SOCKET_ERROR = "socket-error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse-error"


_STATUS_BY_KIND = {
    FetchErrorKind.SOCKET: ScrapeStatus.SOCKET_ERROR,
    FetchErrorKind.TIMEOUT: ScrapeStatus.TIMEOUT,
    FetchErrorKind.PARSE: ScrapeStatus.PARSE_ERROR,
    FetchErrorKind.OTHER: ScrapeStatus.PARSE_ERROR,
}


class BadRequestError(Exception):
    """The scrape request has no usable target"""


class ScrapeError(Exception):
    """A device scrape failed"""

    def __init__(self, target: str, status: ScrapeStatus, cause: str):
        self.target = target
        self.status = status
        self.cause = cause
        super().__init__(f"failed to scrape target '{target}': {cause}")


def classify(error: DeviceFetchError) -> ScrapeStatus:
    return _STATUS_BY_KIND.get(error.kind, ScrapeStatus.PARSE_ERROR)


class ScrapeOrchestrator:
    """Runs single best-effort scrapes against a device client"""

    def __init__(self, client, telemetry: ExporterTelemetry):
        self.client = client
        self.telemetry = telemetry

    async def scrape(self, target: str) -> CollectorRegistry:
        """
        Fetch target once and return a fresh registry with its measurements

        Raises:
            BadRequestError: target is empty, nothing was fetched
            ScrapeError: the fetch failed; status tells how
        """
        if not target:
            raise BadRequestError("'target' parameter must be specified")

        logger.info(f"got scrape request for target '{target}'")

        start = time.monotonic()
        try:
            report = await self.client.fetch(target)
        except DeviceFetchError as e:
            duration = time.monotonic() - start
            status = classify(e)
            self.telemetry.observe_request(target, status.value)
            logger.warning(f"Failed to scrape {target} ({status.value}): {e.cause} (duration: {duration:.3f}s)")
            raise ScrapeError(target, status, e.cause) from e
        duration = time.monotonic() - start

        registry = build_device_registry(report)
        self.telemetry.observe_request(target, ScrapeStatus.OK.value, duration)
        logger.debug(f"Scraped {target} successfully in {duration:.3f}s")
        return registry
