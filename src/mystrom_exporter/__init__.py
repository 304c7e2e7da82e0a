"""
myStrom switch Prometheus exporter with UDP broadcast discovery
"""

__version__ = "1.1.0"
