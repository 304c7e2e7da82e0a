"""
Discovery module for myStrom switches announcing themselves via UDP broadcast
"""

from .manager import MystromDiscovery
from .models import DeviceRecord, DiscoveryStartupError, ManifestError
from .listener import DiscoveryListener, ListenerState
from .table import DeviceTable

__all__ = ['MystromDiscovery', 'DeviceRecord', 'DiscoveryStartupError', 'ManifestError',
           'DiscoveryListener', 'ListenerState', 'DeviceTable']
