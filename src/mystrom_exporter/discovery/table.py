"""
Device table: the only owner of discovered device records
"""

import logging
import threading
import time
from typing import Dict, List, Optional

from .models import DeviceRecord
from .packet import normalize_mac

logger = logging.getLogger(__name__)


class DeviceTable:
    """
    Map of mac address -> DeviceRecord

    A single update task writes through upsert/prune; HTTP handlers read through
    snapshot/lookup. Every access holds the lock, so readers never see a partial write.
    """

    def __init__(self):
        self._records: Dict[str, DeviceRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, record: DeviceRecord) -> bool:
        """Store record, replacing any previous one for the same mac. Returns True for a new device"""
        with self._lock:
            is_new = record.mac_address not in self._records
            self._records[record.mac_address] = record
        return is_new

    def snapshot(self) -> Dict[str, DeviceRecord]:
        """Point-in-time copy of the table"""
        with self._lock:
            return dict(self._records)

    def lookup(self, mac_address: str) -> str:
        """Source ip of the device with this mac, or '' when unknown"""
        key = normalize_mac(mac_address)
        with self._lock:
            record = self._records.get(key)
        return record.source_ip if record else ""

    def prune(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """Remove records not seen for more than max_age seconds, returns the removed macs"""
        now = now if now is not None else time.time()
        with self._lock:
            stale = [mac for mac, record in self._records.items() if now - record.last_seen > max_age]
            for mac in stale:
                del self._records[mac]
        return stale

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
