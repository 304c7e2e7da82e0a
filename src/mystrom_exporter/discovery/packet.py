"""
Decoding of myStrom discovery broadcast packets

Wire format: bytes [0:6] hardware address, byte [6] device type, rest ignored.
"""

import time
from typing import Optional, Tuple

from .models import DeviceRecord

MIN_PACKET_LENGTH = 7


def format_mac(raw: bytes) -> str:
    """6 raw bytes -> 'aa:bb:cc:dd:ee:ff'"""
    return ":".join(f"{b:02x}" for b in raw)


def normalize_mac(mac: str) -> str:
    """Accept 'AA:BB:..', 'aa-bb-..' or 'aabbcc..' and return the canonical lowercase colon form"""
    digits = mac.strip().lower().replace(":", "").replace("-", "")
    if len(digits) != 12:
        return mac.strip().lower()
    return ":".join(digits[i:i + 2] for i in range(0, 12, 2))


def decode_packet(data: bytes, addr: Tuple, now: Optional[float] = None) -> Optional[DeviceRecord]:
    """
    Decode one datagram received from addr (ip, port, ...)
    Returns None for packets too short to carry a mac address and device type
    """
    if len(data) < MIN_PACKET_LENGTH:
        return None

    return DeviceRecord(
        mac_address=format_mac(data[0:6]),
        source_ip=addr[0],
        port=addr[1],
        device_type=data[6],
        last_seen=now if now is not None else time.time(),
    )
