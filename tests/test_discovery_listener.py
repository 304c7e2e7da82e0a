"""Tests for discovery/listener.py."""

import asyncio
import socket
from unittest.mock import MagicMock

import pytest

from mystrom_exporter.discovery.listener import DiscoveryListener, ListenerState, _DiscoveryProtocol
from mystrom_exporter.discovery.models import DiscoveryStartupError
from mystrom_exporter.metrics import ExporterTelemetry

PACKET = bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x02])


def packets_total(telemetry, result):
    return telemetry.registry.get_sample_value("mystrom_exporter_discovery_packets_total", {"result": result})


@pytest.mark.asyncio
async def test_receives_broadcast_over_udp():
    queue = asyncio.Queue(maxsize=10)
    listener = DiscoveryListener(queue, port=0, host="127.0.0.1")
    await listener.start()
    try:
        assert listener.state is ListenerState.LISTENING

        sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sender.sendto(PACKET, ("127.0.0.1", listener.bound_port))
            sender_port = sender.getsockname()[1]
        finally:
            sender.close()

        record = await asyncio.wait_for(queue.get(), timeout=2)
    finally:
        listener.stop()

    assert record.mac_address == "01:02:03:04:05:06"
    assert record.device_type == 2
    assert record.source_ip == "127.0.0.1"
    assert record.port == sender_port
    assert listener.state is ListenerState.STOPPED


@pytest.mark.asyncio
async def test_bind_failure_raises_startup_error():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    blocker.bind(("127.0.0.1", 0))
    try:
        listener = DiscoveryListener(asyncio.Queue(), port=blocker.getsockname()[1], host="127.0.0.1")
        with pytest.raises(DiscoveryStartupError):
            await listener.start()
        assert listener.state is ListenerState.STOPPED
    finally:
        blocker.close()


def listening(queue, telemetry=None):
    listener = DiscoveryListener(queue, telemetry=telemetry)
    listener.state = ListenerState.LISTENING
    return listener


@pytest.mark.asyncio
async def test_short_datagram_is_discarded():
    queue = asyncio.Queue(maxsize=10)
    telemetry = ExporterTelemetry()
    listener = listening(queue, telemetry)

    assert listener.handle_datagram(PACKET[:6], ("10.0.0.5", 1234)) is None

    assert queue.empty()
    assert packets_total(telemetry, "discarded") == 1.0


@pytest.mark.asyncio
async def test_full_queue_drops_oldest_packet():
    queue = asyncio.Queue(maxsize=2)
    telemetry = ExporterTelemetry()
    listener = listening(queue, telemetry)

    for last_byte in (1, 2, 3):
        listener.handle_datagram(bytes([0, 0, 0, 0, 0, last_byte, 1]), ("10.0.0.5", 1234))

    macs = [queue.get_nowait().mac_address for _ in range(queue.qsize())]
    assert macs == ["00:00:00:00:00:02", "00:00:00:00:00:03"]
    assert packets_total(telemetry, "accepted") == 3.0
    assert packets_total(telemetry, "dropped") == 1.0


@pytest.mark.asyncio
async def test_no_packets_processed_after_stop():
    queue = asyncio.Queue(maxsize=10)
    listener = listening(queue)

    listener.stop()

    assert listener.handle_datagram(PACKET, ("10.0.0.5", 1234)) is None
    assert queue.empty()


@pytest.mark.asyncio
async def test_socket_error_keeps_listening():
    queue = asyncio.Queue(maxsize=10)
    listener = listening(queue)

    _DiscoveryProtocol(listener).error_received(OSError("network unreachable"))

    assert listener.state is ListenerState.LISTENING
    assert listener.handle_datagram(PACKET, ("10.0.0.5", 1234)) is not None
    assert queue.qsize() == 1


@pytest.mark.asyncio
async def test_abnormal_connection_loss_stops_listener():
    queue = asyncio.Queue(maxsize=10)
    listener = listening(queue)
    listener.transport = MagicMock()

    _DiscoveryProtocol(listener).connection_lost(OSError("socket gone"))

    assert listener.state is ListenerState.STOPPED
    assert listener.transport is None
    assert listener.handle_datagram(PACKET, ("10.0.0.5", 1234)) is None
