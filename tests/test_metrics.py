"""Tests for metrics/registry.py and metrics/telemetry.py."""

from prometheus_client import CONTENT_TYPE_LATEST

from mystrom_exporter import __version__
from mystrom_exporter.device.models import SwitchReport
from mystrom_exporter.metrics import ExporterTelemetry, build_device_registry, render


def test_device_registry_contains_report_values():
    report = SwitchReport(power=55.5, relay=False, temperature=23.1, energy=54.0,
                          version="3.82.60", mac="5CCF7F000001", device_type="107")

    registry = build_device_registry(report)

    assert registry.get_sample_value("mystrom_switch_power_watts") == 55.5
    assert registry.get_sample_value("mystrom_switch_relay") == 0.0
    assert registry.get_sample_value("mystrom_switch_temperature_celsius") == 23.1
    assert registry.get_sample_value("mystrom_switch_energy_watt_seconds") == 54.0
    assert registry.get_sample_value(
        "mystrom_switch_info", {"version": "3.82.60", "mac": "5CCF7F000001", "type": "107"}
    ) == 1.0


def test_device_registry_includes_build_info():
    registry = build_device_registry(SwitchReport(power=1.0, relay=True))

    text = render(registry).decode()

    assert "mystrom_exporter_build_info{" in text
    assert f'version="{__version__}"' in text


def test_absent_measurements_are_not_exposed():
    registry = build_device_registry(SwitchReport(power=1.0, relay=True))

    assert registry.get_sample_value("mystrom_switch_relay") == 1.0
    assert registry.get_sample_value("mystrom_switch_temperature_celsius") is None
    assert registry.get_sample_value("mystrom_switch_energy_watt_seconds") is None


def test_each_registry_is_independent():
    first = build_device_registry(SwitchReport(power=1.0, relay=True))
    second = build_device_registry(SwitchReport(power=2.0, relay=False))

    assert first is not second
    assert first.get_sample_value("mystrom_switch_power_watts") == 1.0
    assert second.get_sample_value("mystrom_switch_power_watts") == 2.0


def test_telemetry_registries_are_isolated():
    first = ExporterTelemetry()
    second = ExporterTelemetry()

    first.observe_request("10.0.0.5", "ok", 0.5)

    assert first.registry.get_sample_value(
        "mystrom_exporter_request_duration_seconds_total", {"target": "10.0.0.5"}
    ) == 0.5
    assert second.registry.get_sample_value(
        "mystrom_exporter_requests_total", {"target": "10.0.0.5", "status": "ok"}
    ) is None


def test_request_without_duration_only_counts():
    telemetry = ExporterTelemetry(registry=None)

    telemetry.observe_request("10.0.0.5", "timeout")

    assert telemetry.registry.get_sample_value(
        "mystrom_exporter_requests_total", {"target": "10.0.0.5", "status": "timeout"}
    ) == 1.0
    assert telemetry.registry.get_sample_value(
        "mystrom_exporter_request_duration_seconds_total", {"target": "10.0.0.5"}
    ) is None


def test_telemetry_exposes_process_and_build_metrics():
    telemetry = ExporterTelemetry()
    telemetry.count_packet("accepted")

    text = render(telemetry.registry).decode()

    assert "python_info" in text
    assert "mystrom_exporter_build_info" in text
    assert 'mystrom_exporter_discovery_packets_total{result="accepted"} 1.0' in text


def test_content_type_is_prometheus_text():
    assert CONTENT_TYPE_LATEST.startswith("text/plain")
