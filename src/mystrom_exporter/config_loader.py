"""
Configuration loader for the myStrom exporter
Loads and validates configuration from YAML files, command line flags override it
"""

import yaml
import logging
import copy
from typing import Dict, Any, Optional
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "web": {
        "listen_address": ":9452",
        "metrics_path": "/metrics",
        "device_path": "/device",
    },
    "device": {
        "timeout_seconds": 5,
    },
    "discovery": {
        "enabled": False,
        "port": 7979,
        "queue_size": 10,
        "device_ttl_seconds": 0,
        "sweep_interval_seconds": 60,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "console_output": True,
        "timezone": "UTC",
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    Without a path the built-in defaults are returned
    """
    config: Dict[str, Any] = {}
    try:
        if config_path:
            config_file = Path(config_path)
            if not config_file.exists():
                logger.error(f"Configuration file not found: {config_path}")
                raise FileNotFoundError(f"Config file not found: {config_path}")

            with open(config_file, 'r') as f:
                config = yaml.safe_load(f) or {}

            if not isinstance(config, dict):
                raise ValueError("Configuration root must be a mapping")

        config = _apply_defaults(config)
        _validate_config(config)

        if config_path:
            logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


def apply_overrides(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply dotted-key overrides (e.g. 'web.listen_address') on top of a loaded config.
    None values are skipped so unset command line flags keep the file value.
    """
    for dotted_key, value in overrides.items():
        if value is None:
            continue
        section, _, key = dotted_key.partition('.')
        config.setdefault(section, {})[key] = value

    _validate_config(config)
    return config


def _validate_config(config: Dict) -> None:
    """Validate types and ranges of the configuration values"""
    try:
        _check_values(config)
    except (TypeError, KeyError) as e:
        # null or wrongly typed values, e.g. "port:" or "port: [1]"
        raise ValueError(f"invalid configuration value: {e!r}") from e


def _check_values(config: Dict) -> None:
    web = config['web']
    if not str(web['listen_address']).strip():
        raise ValueError("web.listen_address must not be empty")
    parse_listen_address(web['listen_address'])

    for key in ('metrics_path', 'device_path'):
        path = web[key]
        if not isinstance(path, str) or not path.startswith('/'):
            raise ValueError(f"web.{key} must be an absolute path, got {path!r}")
    if web['metrics_path'] == web['device_path']:
        raise ValueError("web.metrics_path and web.device_path must differ")

    if float(config['device']['timeout_seconds']) <= 0:
        raise ValueError("device.timeout_seconds must be > 0")

    discovery = config['discovery']
    if not (1 <= int(discovery['port']) <= 65535):
        raise ValueError(f"discovery.port must be between 1 and 65535, got {discovery['port']}")
    if int(discovery['queue_size']) < 1:
        raise ValueError("discovery.queue_size must be >= 1")
    if float(discovery['device_ttl_seconds']) < 0:
        raise ValueError("discovery.device_ttl_seconds must be >= 0")
    if float(discovery['sweep_interval_seconds']) <= 0:
        raise ValueError("discovery.sweep_interval_seconds must be > 0")

    level = str(config['logging']['level']).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"logging.level is not a valid level: {level}")

    tz_name = config['logging']['timezone']
    try:
        pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"logging.timezone is unknown: {tz_name}")


def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""
    for section, defaults in DEFAULT_CONFIG.items():
        if config.get(section) is None:
            config[section] = {}
        if not isinstance(config[section], dict):
            raise ValueError(f"configuration section '{section}' must be a mapping")
        for key, default_value in defaults.items():
            if key not in config[section]:
                config[section][key] = copy.deepcopy(default_value)
    return config


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split 'host:port' or ':port' into (host, port), empty host means all interfaces"""
    address = str(address).strip()
    host, sep, port_s = address.rpartition(':')
    if not sep:
        raise ValueError(f"listen address must be 'host:port' or ':port', got {address!r}")
    try:
        port = int(port_s)
    except ValueError:
        raise ValueError(f"listen address has an invalid port: {address!r}")
    if not (1 <= port <= 65535):
        raise ValueError(f"listen address port out of range: {address!r}")
    return host.strip('[]'), port


class TimezoneFormatter(logging.Formatter):
    """Formatter rendering timestamps in the configured timezone"""

    def __init__(self, fmt=None, tz_name: str = "UTC"):
        super().__init__(fmt)
        self.tz = pytz.timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        # Default format: YYYY-MM-DD HH:MM:SS TZ
        return dt.strftime('%Y-%m-%d %H:%M:%S %Z')


def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration"""
    log_config = config.get('logging', {})
    level = str(log_config.get('level', 'INFO')).upper()
    tz_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, tz_name)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={tz_name}, "
                f"console={log_config.get('console_output', True)}, file={log_file}")

