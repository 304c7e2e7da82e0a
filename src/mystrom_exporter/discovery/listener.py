"""
UDP broadcast listener for myStrom discovery packets
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Tuple

from .models import DeviceRecord, DiscoveryStartupError
from .packet import decode_packet

logger = logging.getLogger(__name__)

DISCOVERY_PORT = 7979


class ListenerState(str, Enum):
    STOPPED = "stopped"
    LISTENING = "listening"


class _DiscoveryProtocol(asyncio.DatagramProtocol):
    """Hands every datagram to the owning listener"""

    def __init__(self, listener: "DiscoveryListener"):
        self.listener = listener

    def datagram_received(self, data: bytes, addr: Tuple) -> None:
        self.listener.handle_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        # ICMP errors and the like; the endpoint stays open and keeps receiving
        logger.warning(f"Discovery socket error: {exc}")

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self.listener._on_connection_lost(exc)


class DiscoveryListener:
    """
    Receives discovery broadcasts on a fixed UDP port and feeds decoded
    records into a bounded queue.

    The producer never blocks the event loop: when the queue is full the
    oldest pending record is dropped in favour of the new one.
    """

    def __init__(self, queue: asyncio.Queue, port: int = DISCOVERY_PORT, host: str = "0.0.0.0", telemetry=None):
        self.queue = queue
        self.port = port
        self.host = host
        self.telemetry = telemetry
        self.state = ListenerState.STOPPED
        self.transport: Optional[asyncio.DatagramTransport] = None

    async def start(self) -> None:
        """Bind the socket; raises DiscoveryStartupError if that is not possible"""
        if self.state is ListenerState.LISTENING:
            return

        loop = asyncio.get_running_loop()
        try:
            self.transport, _ = await loop.create_datagram_endpoint(
                lambda: _DiscoveryProtocol(self),
                local_addr=(self.host, self.port),
                allow_broadcast=True,
            )
        except OSError as e:
            raise DiscoveryStartupError(f"unable to listen on udp {self.host}:{self.port}: {e}") from e

        self.state = ListenerState.LISTENING
        logger.info(f"Discovery listener bound to udp {self.host}:{self.bound_port}")

    def stop(self) -> None:
        """Close the socket; no packets are processed afterwards"""
        if self.transport is not None:
            self.transport.close()
            self.transport = None
        if self.state is ListenerState.LISTENING:
            logger.info("stopping discovery listener")
        self.state = ListenerState.STOPPED

    @property
    def bound_port(self) -> Optional[int]:
        if self.transport is None:
            return None
        sockname = self.transport.get_extra_info('sockname')
        return sockname[1] if sockname else None

    def handle_datagram(self, data: bytes, addr: Tuple) -> Optional[DeviceRecord]:
        """Decode one datagram and enqueue it, undersized packets are ignored"""
        if self.state is not ListenerState.LISTENING:
            return None

        record = decode_packet(data, addr)
        if record is None:
            self._count("discarded")
            return None

        logger.debug(f"msg: {record.source_ip} | {record.mac_address}")
        if self.queue.full():
            dropped = self.queue.get_nowait()
            self.queue.task_done()
            self._count("dropped")
            logger.warning(f"Discovery queue full, dropped packet from {dropped.mac_address}")
        self.queue.put_nowait(record)
        self._count("accepted")
        return record

    def _on_connection_lost(self, exc: Optional[Exception]) -> None:
        # A regular close() already went through stop()
        if exc is None:
            return
        logger.error(f"Discovery listener lost its socket: {exc}")
        self.transport = None
        self.state = ListenerState.STOPPED

    def _count(self, result: str) -> None:
        if self.telemetry is not None:
            self.telemetry.count_packet(result)
