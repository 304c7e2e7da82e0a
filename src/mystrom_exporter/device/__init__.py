"""
Device client for myStrom WiFi switches
"""

from .client import MystromClient
from .models import SwitchReport, DeviceFetchError, FetchErrorKind

__all__ = ['MystromClient', 'SwitchReport', 'DeviceFetchError', 'FetchErrorKind']
