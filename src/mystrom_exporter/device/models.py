"""
Device data structures and fetch errors
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass


@dataclass
class SwitchReport:
    """Measurements read from one myStrom switch"""
    power: float
    relay: bool
    temperature: Optional[float] = None
    energy: Optional[float] = None  # watt seconds since last report ("Ws")
    version: str = ""
    mac: str = ""
    device_type: str = ""


class FetchErrorKind(str, Enum):
    """Why a device fetch failed"""
    SOCKET = "socket"
    TIMEOUT = "timeout"
    PARSE = "parse"
    OTHER = "other"


class DeviceFetchError(Exception):
    """A device could not be fetched; kind tells callers how it failed"""

    def __init__(self, kind: FetchErrorKind, target: str, cause: str):
        self.kind = kind
        self.target = target
        self.cause = cause
        super().__init__(cause)
