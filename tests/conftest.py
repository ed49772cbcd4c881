"""Shared test fixtures for the PASOE bridge test suite."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from core.models import RestRequest, RestResponse, TransportConfig
from core.rest_client import PasoeRestClient

BASE_URL = "https://localhost:8810"


@pytest.fixture
def config() -> TransportConfig:
    """A configuration with credentials and default context."""
    return TransportConfig(
        base_url=BASE_URL,
        web_app_name="web",
        username="user",
        password="secret",
        timeout_seconds=5,
    )


@pytest.fixture
def make_client() -> Callable[..., PasoeRestClient]:
    """Factory fixture building a PasoeRestClient on an httpx.MockTransport.

    Usage:
        def test_something(make_client, config):
            client = make_client(lambda request: httpx.Response(200), config)
    """
    def _make(handler: Callable[[httpx.Request], Any], config: TransportConfig) -> PasoeRestClient:
        return PasoeRestClient(config, transport=httpx.MockTransport(handler))

    return _make


class RecordingClient:
    """Stand-in executor that records requests and returns a canned outcome."""

    def __init__(
        self,
        response: RestResponse | None = None,
        connected: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.response = response or RestResponse(
            is_success=True, status_code=200, response_body='{"ok": true}'
        )
        self.connected = connected
        self.error = error
        self.requests: list[RestRequest] = []
        self.closed = False

    async def send_request(self, request: RestRequest, cancel_event=None) -> RestResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    async def test_connection(self, cancel_event=None) -> bool:
        if self.error is not None:
            raise self.error
        return self.connected

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()
