"""
Discovery service: listener, update loop and device table wired together
"""

import asyncio
import logging
import socket
from typing import Dict, Optional

from ..config_loader import parse_listen_address
from .listener import DiscoveryListener, ListenerState, DISCOVERY_PORT
from .manifest import build_manifest
from .models import DeviceRecord, DiscoveryStartupError
from .table import DeviceTable

logger = logging.getLogger(__name__)

_WILDCARD_HOSTS = ("", "0.0.0.0", "::")


def get_outbound_ip() -> str:
    """Preferred outbound ip of this machine, nothing is actually sent"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("8.8.8.8", 80))
        return sock.getsockname()[0]
    finally:
        sock.close()


def resolve_exporter_address(listen_address: str) -> str:
    """
    Address the collector should use to reach this exporter.
    A wildcard host (':9452', '0.0.0.0:9452') is replaced by the outbound ip.
    """
    host, port = parse_listen_address(listen_address)
    if host not in _WILDCARD_HOSTS:
        return listen_address
    try:
        return f"{get_outbound_ip()}:{port}"
    except OSError as e:
        raise DiscoveryStartupError(f"unable to determine the outbound ip address: {e}") from e


class MystromDiscovery:
    """Passive discovery of myStrom switches broadcasting on the local segment"""

    def __init__(self, config: Dict, listen_address: str, telemetry=None):
        self.config = config
        self.listen_address = listen_address
        self.port = config.get('port', DISCOVERY_PORT)
        self.device_ttl = float(config.get('device_ttl_seconds', 0))
        self.sweep_interval = float(config.get('sweep_interval_seconds', 60))

        self.table = DeviceTable()
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=config.get('queue_size', 10))
        self.listener = DiscoveryListener(self.queue, self.port, config.get('bind_host', '0.0.0.0'), telemetry)
        self.exporter_address: Optional[str] = None
        self.tasks = []

    @property
    def state(self) -> ListenerState:
        return self.listener.state

    async def start(self):
        """Resolve our own address, bind the listener and start the background tasks"""
        self.exporter_address = resolve_exporter_address(self.listen_address)
        await self.listener.start()

        self.tasks = [asyncio.create_task(self._update_service(), name="discovery-update")]
        if self.device_ttl > 0:
            self.tasks.append(asyncio.create_task(self._sweep_service(), name="discovery-sweep"))
            logger.info(f"Devices silent for {self.device_ttl:.0f}s will be forgotten")

        logger.info(f"Discovery started, advertising exporter address {self.exporter_address}")

    async def stop(self):
        """Close the socket and stop the background tasks"""
        self.listener.stop()

        for task in self.tasks:
            task.cancel()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks = []

    def lookup(self, mac_address: str) -> str:
        return self.table.lookup(mac_address)

    def manifest(self) -> bytes:
        return build_manifest(self.table.snapshot(), self.exporter_address or self.listen_address)

    def apply(self, record: DeviceRecord) -> None:
        """Write one decoded packet into the table"""
        if self.table.upsert(record):
            logger.info(f"Discovered device {record.mac_address} (type {record.device_type}) at {record.source_ip}")
        else:
            logger.debug(f"Updated device {record.mac_address} at {record.source_ip}")

    async def _update_service(self):
        """Sole writer of the table, drains the listener queue"""
        while True:
            record = await self.queue.get()
            try:
                self.apply(record)
            except Exception as e:
                logger.error(f"Discovery update error: {e}")
            finally:
                self.queue.task_done()

    async def _sweep_service(self):
        """Forget devices that stopped broadcasting"""
        while True:
            await asyncio.sleep(self.sweep_interval)
            removed = self.table.prune(self.device_ttl)
            for mac in removed:
                logger.info(f"Forgetting device {mac}, not seen for more than {self.device_ttl:.0f}s")
