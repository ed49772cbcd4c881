# =============================================================================
# core/interfaces.py  —  Executor contract
# =============================================================================
#
# The dispatcher (core/operations.py) depends on this Protocol, not on
# PasoeRestClient, so any object with the same coroutines can stand in
# for the real executor.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, runtime_checkable

from core.models import RestRequest, RestResponse


@runtime_checkable
class RestClient(Protocol):
    """Sends REST requests to PASOE and never raises past its boundary."""

    async def send_request(
        self,
        request: RestRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RestResponse:
        """Execute one request and return its normalized outcome."""
        ...

    async def test_connection(self, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """Return True when the web application answers."""
        ...

    async def aclose(self) -> None:
        """Release pooled connections.  The client is unusable afterwards."""
        ...
