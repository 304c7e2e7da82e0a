"""
API module for device scrapes and discovery
"""

from .main_api import ExporterAPI
from .device_routes import create_device_routes
from .discovery_routes import create_discovery_routes

__all__ = ['ExporterAPI', 'create_device_routes', 'create_discovery_routes']
