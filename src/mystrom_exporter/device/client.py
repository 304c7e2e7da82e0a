"""
HTTP client for the myStrom switch REST API
"""

import asyncio
import logging
from typing import Any, Dict

import aiohttp

from ..http_helper import create_device_session
from .models import SwitchReport, DeviceFetchError, FetchErrorKind

logger = logging.getLogger(__name__)


class MystromClient:
    """Reads the current report of a myStrom switch"""

    def __init__(self, timeout_seconds: float = 5):
        self.timeout_seconds = timeout_seconds

    async def fetch(self, target: str) -> SwitchReport:
        """
        Fetch /report and /info from the switch at target (host or host:port)

        Raises:
            DeviceFetchError: classified by the kind of failure
        """
        base_url = f"http://{target}"
        async with create_device_session(self.timeout_seconds) as session:
            report = await self._get_json(session, target, f"{base_url}/report")
            result = self._parse_report(target, report)

            try:
                info = await self._get_json(session, target, f"{base_url}/info")
            except DeviceFetchError as e:
                if e.kind is not FetchErrorKind.PARSE:
                    raise
                # Older firmware has no usable /info, the report alone is enough
                logger.debug(f"Ignoring unusable /info from {target}: {e.cause}")
                info = {}

        result.version = str(info.get('version', ''))
        result.mac = str(info.get('mac', ''))
        result.device_type = str(info.get('type', ''))
        return result

    async def _get_json(self, session: aiohttp.ClientSession, target: str, url: str) -> Dict[str, Any]:
        """GET url and return the decoded JSON object, failures become DeviceFetchError"""
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise DeviceFetchError(
                        FetchErrorKind.PARSE, target, f"unexpected HTTP status {response.status} from {url}"
                    )
                payload = await response.json(content_type=None)
        except DeviceFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise DeviceFetchError(FetchErrorKind.TIMEOUT, target, f"timeout reading {url}") from e
        except aiohttp.ClientConnectionError as e:
            raise DeviceFetchError(FetchErrorKind.SOCKET, target, f"unable to connect with target: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError
            raise DeviceFetchError(FetchErrorKind.PARSE, target, f"invalid JSON from {url}: {e}") from e
        except aiohttp.ClientError as e:
            raise DeviceFetchError(FetchErrorKind.OTHER, target, f"request to {url} failed: {e}") from e

        if not isinstance(payload, dict):
            raise DeviceFetchError(FetchErrorKind.PARSE, target, f"expected a JSON object from {url}")
        return payload

    @staticmethod
    def _parse_report(target: str, report: Dict[str, Any]) -> SwitchReport:
        """Convert the /report payload into a SwitchReport"""
        try:
            power = float(report['power'])
            relay = report['relay']
            if not isinstance(relay, bool):
                raise ValueError(f"relay is not a boolean: {relay!r}")
            temperature = report.get('temperature')
            energy = report.get('Ws')
            return SwitchReport(
                power=power,
                relay=relay,
                temperature=float(temperature) if temperature is not None else None,
                energy=float(energy) if energy is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DeviceFetchError(FetchErrorKind.PARSE, target, f"unable to parse report: {e!r}") from e
