"""
Prometheus http_sd / file_sd manifest built from the device table
"""

import json
import logging
from typing import Dict, List

from pydantic import BaseModel

from .models import DeviceRecord, ManifestError

logger = logging.getLogger(__name__)


class ManifestEntry(BaseModel):
    targets: List[str]
    labels: Dict[str, str]


def manifest_entry(record: DeviceRecord, exporter_address: str) -> ManifestEntry:
    """One scrape target pointing back at this exporter for the given switch"""
    return ManifestEntry(
        targets=[exporter_address],
        labels={
            "instance": record.source_ip,
            "__metrics_path__": f"/device_by_mac/{record.mac_address}",
            "__mac_address": record.mac_address,
            "__device_type": str(record.device_type),
        },
    )


def build_manifest(records: Dict[str, DeviceRecord], exporter_address: str) -> bytes:
    """
    Serialize a table snapshot into the JSON manifest, ordered by mac address

    Raises:
        ManifestError: if the snapshot cannot be serialized
    """
    try:
        entries = [manifest_entry(records[mac], exporter_address).model_dump() for mac in sorted(records)]
        return json.dumps(entries).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ManifestError(f"unable to build discovery manifest: {e}") from e
