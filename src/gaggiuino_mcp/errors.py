"""Error types raised by the Gaggiuino client and tool gateway.

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

from typing import Optional


class GaggiuinoError(Exception):
    """Base class for all errors surfaced to tool callers."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportError(GaggiuinoError):
    """Raised on network failure, timeout, or a non-2xx HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize transport error.

        Args:
            message: Error message
            status_code: HTTP status code, when the machine answered at all
        """
        self.status_code = status_code
        super().__init__(message)


class ProtocolError(GaggiuinoError):
    """Raised when the machine's response does not have the expected shape."""


class ArgumentValidationError(GaggiuinoError):
    """Raised when tool arguments fail a local precondition."""
