"""Tests for the Gaggiuino API client."""

import anyio
import httpx
import pytest

from gaggiuino_mcp.api_client import GaggiuinoAPIClient
from gaggiuino_mcp.errors import ProtocolError, TransportError

pytestmark = pytest.mark.anyio


def make_client(handler, base_url="http://gaggiuino.test", timeout_ms=5000):
    """Create a client whose requests are answered by handler."""
    return GaggiuinoAPIClient(base_url, timeout_ms, transport=httpx.MockTransport(handler))


class Recorder:
    """Request handler that records requests and returns a fixed response."""

    def __init__(self, status_code=200, json=None, content=None):
        self.requests = []
        self.status_code = status_code
        self.json = json
        self.content = content

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)


async def test_base_url_trailing_slash_stripped():
    client = GaggiuinoAPIClient("http://gaggiuino.test/", 5000)
    assert client.base_url == "http://gaggiuino.test"
    assert client.timeout_ms == 5000


async def test_get_system_status(status_payload):
    """Test that status is fetched from the right endpoint and decoded."""
    recorder = Recorder(json=status_payload)
    client = make_client(recorder, base_url="http://gaggiuino.test/")

    status = await client.get_system_status()

    assert status.brewing is True
    assert status.water_level == 72
    assert len(recorder.requests) == 1
    assert recorder.requests[0].method == "GET"
    assert str(recorder.requests[0].url) == "http://gaggiuino.test/api/system/status"


async def test_get_system_status_invalid_shape():
    client = make_client(Recorder(json=[]))
    with pytest.raises(ProtocolError) as exc_info:
        await client.get_system_status()
    assert "invalid status response" in str(exc_info.value)


async def test_get_latest_shot_id():
    recorder = Recorder(json=[{"lastShotId": "118"}])
    client = make_client(recorder)
    assert await client.get_latest_shot_id() == 118
    assert recorder.requests[0].url.path == "/api/shots/latest"


async def test_get_latest_shot_id_missing():
    client = make_client(Recorder(json=[{}]))
    with pytest.raises(ProtocolError):
        await client.get_latest_shot_id()


async def test_get_shot(shot_payload):
    recorder = Recorder(json=shot_payload)
    client = make_client(recorder)

    shot = await client.get_shot(42)

    assert recorder.requests[0].url.path == "/api/shots/42"
    assert shot.duration_seconds == 28.5
    assert shot.datapoints.pressure_bar == [0.0, 2.1, 8.9]


async def test_get_shot_missing_datapoints():
    client = make_client(Recorder(json={"id": 42}))
    with pytest.raises(ProtocolError) as exc_info:
        await client.get_shot(42)
    assert "missing datapoints" in str(exc_info.value)


async def test_get_profiles(profiles_payload):
    recorder = Recorder(json=profiles_payload)
    client = make_client(recorder)

    profiles = await client.get_profiles()

    assert recorder.requests[0].url.path == "/api/profiles/all"
    assert [p.selected for p in profiles] == [False, True]


async def test_get_profiles_not_a_list():
    client = make_client(Recorder(json={"profiles": []}))
    with pytest.raises(ProtocolError):
        await client.get_profiles()


async def test_select_profile_posts_and_ignores_body():
    """Test that selecting a profile only depends on the status code."""
    recorder = Recorder(content=b"not json at all")
    client = make_client(recorder)

    result = await client.select_profile(7)

    assert result is None
    assert recorder.requests[0].method == "POST"
    assert recorder.requests[0].url.path == "/api/profile-select/7"


async def test_http_error_is_not_retried():
    """Test that a 500 fails once with the status in the message."""
    recorder = Recorder(status_code=500, json={"error": "boom"})
    client = make_client(recorder)

    with pytest.raises(TransportError) as exc_info:
        await client.get_system_status()

    assert "500" in str(exc_info.value)
    assert str(exc_info.value) == "HTTP 500: Internal Server Error"
    assert exc_info.value.status_code == 500
    assert len(recorder.requests) == 1


async def test_select_profile_http_error():
    client = make_client(Recorder(status_code=404))
    with pytest.raises(TransportError) as exc_info:
        await client.select_profile(99)
    assert str(exc_info.value) == "HTTP 404: Not Found"


async def test_timeout_message_uses_configured_value():
    """Test that a slow machine fails with the configured timeout in the message."""

    async def slow_handler(request):
        await anyio.sleep(5)
        return httpx.Response(200, json=[])

    client = make_client(slow_handler, timeout_ms=50)

    with pytest.raises(TransportError) as exc_info:
        await client.get_system_status()

    assert str(exc_info.value) == "Request timeout after 50ms"


async def test_httpx_timeout_is_reported_as_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler, timeout_ms=1234)
    with pytest.raises(TransportError) as exc_info:
        await client.get_profiles()
    assert str(exc_info.value) == "Request timeout after 1234ms"


async def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    with pytest.raises(TransportError) as exc_info:
        await client.get_system_status()
    assert "connection refused" in str(exc_info.value)
    assert exc_info.value.status_code is None


async def test_invalid_json():
    client = make_client(Recorder(content=b"<html>oops</html>"))
    with pytest.raises(ProtocolError) as exc_info:
        await client.get_system_status()
    assert "invalid JSON" in str(exc_info.value)
