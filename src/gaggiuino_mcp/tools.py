"""MCP tools for reading and controlling a Gaggiuino machine.

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
from typing import Any, Awaitable, Callable, Dict, List, Optional

import mcp.types as types

from .api_client import GaggiuinoAPIClient
from .errors import ArgumentValidationError
from .models import profiles_to_json

logger = logging.getLogger(__name__)


TOOLS: List[types.Tool] = [
    types.Tool(
        name="get_status",
        description=(
            "Get real-time Gaggiuino espresso machine status including: current/target temperature (Celsius), "
            "pressure (bar), scale weight (grams), water tank level (%), whether brewing or steaming is active, "
            "and the currently selected profile name and ID."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="get_shot",
        description=(
            "Retrieve detailed shot data with time-series curves for analysis. Returns pressure (bar), "
            "flow rate (ml/s), temperature (C), weight (g), and target values over time. Includes the profile "
            "used and shot duration. Omit ID to get the most recent shot."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "number", "description": "Shot ID for historical data. Omit to get the latest shot."},
            },
        },
    ),
    types.Tool(
        name="get_profiles",
        description=(
            "List all available brewing profiles stored on the Gaggiuino. Returns profile IDs, names, and which "
            "one is currently selected. Use this to see available profiles before selecting one."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="select_profile",
        description=(
            "Activate a brewing profile by its ID. The machine will use this profile for the next shot. "
            "Get available profile IDs using get_profiles first."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "number", "description": "Profile ID to activate"},
            },
            "required": ["id"],
        },
    ),
]


def _as_integer(value: Any) -> Optional[int]:
    """Return value as an int if it is a JSON number with no fractional part."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


class ToolGateway:
    """Maps tool calls onto GaggiuinoAPIClient operations.

    Each call is independent. Any failure, whether from argument validation or
    from the machine, comes back as an error result instead of an exception.
    """

    def __init__(self, api_client: GaggiuinoAPIClient):
        self._api_client = api_client
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[str]]] = {
            "get_status": self._get_status,
            "get_shot": self._get_shot,
            "get_profiles": self._get_profiles,
            "select_profile": self._select_profile,
        }

    def list_tools(self) -> List[types.Tool]:
        """Return the tool catalog."""
        return list(TOOLS)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        """Run a tool and wrap its outcome in a CallToolResult.

        Args:
            name: Tool name
            arguments: Tool arguments as sent by the caller, may be None

        Returns:
            Text result, flagged with isError when the call failed
        """
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise ValueError(f"Unknown tool: {name}")
            text = await handler(arguments or {})
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("Tool %s failed: %s", name, message)
            return _text_result(f"Error: {message}", is_error=True)
        return _text_result(text)

    async def _get_status(self, arguments: Dict[str, Any]) -> str:
        status = await self._api_client.get_system_status()
        return status.to_json()

    async def _get_shot(self, arguments: Dict[str, Any]) -> str:
        if "id" in arguments:
            shot_id = _as_integer(arguments["id"])
            if shot_id is None or shot_id <= 0:
                raise ArgumentValidationError("Shot ID must be a positive integer")
        else:
            shot_id = await self._api_client.get_latest_shot_id()
        shot = await self._api_client.get_shot(shot_id)
        return shot.to_json()

    async def _get_profiles(self, arguments: Dict[str, Any]) -> str:
        profiles = await self._api_client.get_profiles()
        return profiles_to_json(profiles)

    async def _select_profile(self, arguments: Dict[str, Any]) -> str:
        profile_id = _as_integer(arguments.get("id"))
        if profile_id is None:
            raise ArgumentValidationError("Profile ID must be an integer")
        await self._api_client.select_profile(profile_id)
        return f"Profile {profile_id} selected"
