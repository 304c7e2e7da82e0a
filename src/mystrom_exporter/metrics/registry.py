"""
Per-scrape registry factory for myStrom switch measurements
"""

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily

from ..device.models import SwitchReport
from .telemetry import register_build_info

SWITCH_NAMESPACE = "mystrom_switch"


class SwitchReportCollector:
    """Exposes one SwitchReport as gauge families"""

    def __init__(self, report: SwitchReport):
        self.report = report

    def collect(self):
        report = self.report

        yield GaugeMetricFamily(
            f"{SWITCH_NAMESPACE}_power_watts", "The current power consumed by devices attached to the switch",
            value=report.power,
        )
        yield GaugeMetricFamily(
            f"{SWITCH_NAMESPACE}_relay", "The current state of the relay (whether or not the relay is currently turned on)",
            value=1.0 if report.relay else 0.0,
        )
        if report.temperature is not None:
            yield GaugeMetricFamily(
                f"{SWITCH_NAMESPACE}_temperature_celsius", "The currently measured temperature by the switch",
                value=report.temperature,
            )
        if report.energy is not None:
            yield GaugeMetricFamily(
                f"{SWITCH_NAMESPACE}_energy_watt_seconds", "Average of energy consumed per second from last call",
                value=report.energy,
            )

        info = GaugeMetricFamily(
            f"{SWITCH_NAMESPACE}_info", "General information about the device",
            labels=["version", "mac", "type"],
        )
        info.add_metric([report.version, report.mac, report.device_type], 1.0)
        yield info


def build_device_registry(report: SwitchReport) -> CollectorRegistry:
    """Build a fresh registry holding only this report and the build metadata"""
    registry = CollectorRegistry()
    registry.register(SwitchReportCollector(report))
    register_build_info(registry)
    return registry


def render(registry: CollectorRegistry) -> bytes:
    return generate_latest(registry)
