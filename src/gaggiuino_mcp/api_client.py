"""API client for the Gaggiuino espresso machine REST API.

Copyright (C) 2024 Gaggiuino MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import logging
from typing import Any, List, Optional

import anyio
import httpx

from .decoders import decode_latest_shot_id, decode_profiles, decode_shot, decode_status
from .errors import ProtocolError, TransportError
from .models import MachineStatus, ProfileListing, ShotSummary

logger = logging.getLogger(__name__)


class GaggiuinoAPIClient:
    """Async client for the machine's REST API.

    Every request runs under its own deadline. Failures of any kind are raised
    as TransportError or ProtocolError; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout_ms: int,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the API client.

        Args:
            base_url: Base URL of the machine, e.g. http://192.168.3.248
            timeout_ms: Per-request timeout in milliseconds
            transport: Optional httpx transport, mainly for tests
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_ms = timeout_ms
        self._transport = transport

    @property
    def base_url(self) -> str:
        """Get the base URL."""
        return self._base_url

    @property
    def timeout_ms(self) -> int:
        """Get the request timeout in milliseconds."""
        return self._timeout_ms

    async def _request(self, method: str, endpoint: str) -> httpx.Response:
        url = f"{self._base_url}{endpoint}"
        timeout = self._timeout_ms / 1000
        logger.debug("%s %s", method, url)
        try:
            with anyio.fail_after(timeout):
                async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                    response = await client.request(method, url)
        except (TimeoutError, httpx.TimeoutException):
            logger.debug("%s %s timed out after %sms", method, url, self._timeout_ms)
            raise TransportError(f"Request timeout after {self._timeout_ms}ms")
        except httpx.RequestError as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            logger.debug("%s %s returned HTTP %s", method, url, response.status_code)
            raise TransportError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    async def _get_json(self, endpoint: str) -> Any:
        response = await self._request("GET", endpoint)
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(f"invalid JSON response from {endpoint}") from e

    async def get_system_status(self) -> MachineStatus:
        """Get the latest sensor snapshot.

        Returns:
            MachineStatus with booleans and numbers parsed from the device strings

        Raises:
            TransportError: On network failure, timeout or non-2xx status
            ProtocolError: If the response is not a non-empty array of objects
        """
        result = decode_status(await self._get_json("/api/system/status"))
        if isinstance(result, ProtocolError):
            raise result
        return result

    async def get_latest_shot_id(self) -> int:
        """Get the ID of the most recent shot."""
        result = decode_latest_shot_id(await self._get_json("/api/shots/latest"))
        if isinstance(result, ProtocolError):
            raise result
        return result

    async def get_shot(self, shot_id: int) -> ShotSummary:
        """Get a recorded shot with datapoints converted to physical units.

        Args:
            shot_id: The shot ID

        Returns:
            ShotSummary

        Raises:
            TransportError: On network failure, timeout or non-2xx status
            ProtocolError: If the shot or its datapoints are malformed
        """
        result = decode_shot(await self._get_json(f"/api/shots/{shot_id}"), shot_id)
        if isinstance(result, ProtocolError):
            raise result
        return result

    async def get_profiles(self) -> List[ProfileListing]:
        """List all profiles stored on the machine."""
        result = decode_profiles(await self._get_json("/api/profiles/all"))
        if isinstance(result, ProtocolError):
            raise result
        return result

    async def select_profile(self, profile_id: int) -> None:
        """Make a profile active. The response body is ignored."""
        await self._request("POST", f"/api/profile-select/{profile_id}")
