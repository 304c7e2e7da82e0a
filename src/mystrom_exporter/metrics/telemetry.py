"""
Exporter self-telemetry: process metrics, request counters and build information
"""

import logging
import platform
from typing import Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector

from .. import __version__

logger = logging.getLogger(__name__)

NAMESPACE = "mystrom_exporter"


def build_info_labels() -> Dict[str, str]:
    """Labels of the constant build_info gauge"""
    return {
        "version": __version__,
        "pythonversion": platform.python_version(),
        "implementation": platform.python_implementation(),
    }


def register_build_info(registry: CollectorRegistry) -> Gauge:
    """Add mystrom_exporter_build_info (constant 1) to registry"""
    labels = build_info_labels()
    build_info = Gauge(
        "build_info",
        "A metric with a constant '1' value labeled by build information.",
        list(labels),
        namespace=NAMESPACE,
        registry=registry,
    )
    build_info.labels(**labels).set(1)
    return build_info


class ExporterTelemetry:
    """Process-wide counters, constructed once at startup and handed to the components using them"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)

        self.request_duration = Counter(
            "request_duration_seconds",
            "Total duration of mystrom successful requests by target in seconds",
            ["target"],
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.requests = Counter(
            "requests",
            "Number of mystrom request by status and target",
            ["target", "status"],
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.discovery_packets = Counter(
            "discovery_packets",
            "Number of discovery broadcast packets by result",
            ["result"],
            namespace=NAMESPACE,
            registry=self.registry,
        )
        register_build_info(self.registry)

    def observe_request(self, target: str, status: str, duration: Optional[float] = None) -> None:
        """Count one scrape outcome; duration is only accumulated for successful requests"""
        self.requests.labels(target=target, status=status).inc()
        if duration is not None:
            self.request_duration.labels(target=target).inc(duration)

    def count_packet(self, result: str) -> None:
        self.discovery_packets.labels(result=result).inc()
