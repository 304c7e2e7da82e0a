"""
Discovery data structures and models
"""

import time
from dataclasses import dataclass, field


@dataclass
class DeviceRecord:
    """Latest known network identity of one switch, keyed by mac_address"""
    mac_address: str   # lowercase colon-separated, e.g. 01:02:03:04:05:06
    source_ip: str
    port: int
    device_type: int
    last_seen: float = field(default_factory=time.time)


class DiscoveryStartupError(Exception):
    """The discovery listener could not be started"""


class ManifestError(Exception):
    """The discovery manifest could not be serialized"""
