"""
Prometheus registries for the exporter itself and for scraped switches
"""

from .telemetry import ExporterTelemetry, build_info_labels
from .registry import build_device_registry, render

__all__ = ['ExporterTelemetry', 'build_info_labels', 'build_device_registry', 'render']
