# =============================================================================
# core/rest_client.py  —  Request Executor (the only module that does I/O)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a RestRequest into one HTTP exchange with the PASOE server and
#   turns whatever happens into a RestResponse.  It owns:
#     - the httpx.AsyncClient (and whatever pooling httpx does)
#     - Basic authentication
#     - the TLS verification switch
#     - the request timeout (a deadline on the whole exchange)
#     - redirect following
#
# THE CONTRACT:
#   send_request() and test_connection() never raise.  Every failure becomes
#   a value:
#
#     missing base URL          →  status 0, "PASOE BaseUrl is not configured..."
#     timeout / cancellation    →  status 0, "Request timed out"
#     DNS, refused, reset, ...  →  status 0, "HTTP request failed: ..."
#     anything else             →  status 0, "Unexpected error: ..."
#     non-2xx from the server   →  real status, "HTTP <code>: <reason>"
#
# URL SHAPE:
#   base_url (no trailing "/") + "/" + web_app_name (no outer "/") + path
#   e.g.  https://localhost:8810 + /web + /rest/Customer/42
#
# CONCURRENCY:
#   Everything stored on the instance is fixed at construction time.  All
#   per-call objects (request, response, merged headers) are locals, so a
#   single client serves concurrent tool calls.
# =============================================================================

from __future__ import annotations

import asyncio
import base64
import contextlib
import logging
from typing import Optional

import httpx

from core.errors import ConfigurationError
from core.models import RestRequest, RestResponse, TransportConfig

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# Callers may add or replace any header except these two.
_PROTECTED_HEADERS = frozenset({"authorization", "content-type"})

# A probe that gets one of these back treats the server as unreachable.
_UNREACHABLE_STATUSES = frozenset({404, 503})


class RequestCancelled(Exception):
    """The caller's cancel_event fired before the exchange finished."""


def _basic_credentials(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class PasoeRestClient:
    """Executes REST requests against one PASOE web application.

    Usage:
        async with PasoeRestClient(config) as client:
            response = await client.send_request(RestRequest("/rest/Svc/Customer", "GET"))

    Args:
        config: The transport configuration.
        transport: Optional httpx transport, mainly for tests
            (httpx.MockTransport).
    """

    def __init__(
        self,
        config: TransportConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._default_headers = self._build_default_headers(config)

        verify = True
        if config.accept_invalid_ssl_certificates is True:
            logger.warning(
                "TLS certificate validation is DISABLED for %s. "
                "Only use this against development or test servers.",
                config.base_url or "<unconfigured>",
            )
            verify = False

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
            verify=verify,
            follow_redirects=True,
            transport=transport,
        )

    @staticmethod
    def _build_default_headers(config: TransportConfig) -> dict[str, str]:
        headers = {"Accept": JSON_MEDIA_TYPE}
        if config.has_credentials:
            headers["Authorization"] = _basic_credentials(config.username, config.password)
        return headers

    @property
    def config(self) -> TransportConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PasoeRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # URL and header construction
    # -------------------------------------------------------------------------
    def build_service_url(self, service_path: str = "") -> str:
        """Build the absolute URL for a path under the web application.

        Raises:
            ConfigurationError: When no base URL is configured.
        """
        if not self._config.base_url:
            raise ConfigurationError(
                "PASOE BaseUrl is not configured. Please check the Pasoe:BaseUrl "
                "setting (environment variable PASOE_BASE_URL)."
            )

        path = service_path or ""
        if path and not path.startswith("/"):
            path = "/" + path

        url = f"{self._config.base_url.rstrip('/')}/{self._config.web_app_name.strip('/')}{path}"
        logger.debug("Built service URL: %s", url)
        return url

    def _merge_headers(self, request: RestRequest) -> dict[str, str]:
        headers = dict(self._default_headers)

        for name, value in request.headers.items():
            if name.lower() in _PROTECTED_HEADERS:
                logger.debug("Ignoring caller-supplied %s header", name)
                continue
            for existing in [key for key in headers if key.lower() == name.lower()]:
                del headers[existing]
            headers[name] = value

        if request.has_body:
            headers["Content-Type"] = JSON_MEDIA_TYPE
        return headers

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------
    async def _send(
        self,
        http_request: httpx.Request,
        cancel_event: Optional[asyncio.Event],
    ) -> httpx.Response:
        # httpx.Timeout bounds each connect/read/write step on its own; this
        # deadline bounds the whole exchange, body included.
        deadline = self._config.timeout_seconds
        if cancel_event is None:
            return await asyncio.wait_for(self._client.send(http_request), deadline)
        if cancel_event.is_set():
            raise RequestCancelled()

        send_task = asyncio.ensure_future(self._client.send(http_request))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task},
                timeout=deadline,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()

        if send_task in done:
            return send_task.result()

        with contextlib.suppress(asyncio.CancelledError):
            await send_task
        if cancel_task in done:
            raise RequestCancelled()
        raise asyncio.TimeoutError()

    async def send_request(
        self,
        request: RestRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RestResponse:
        """Send one request and normalize the outcome.

        Args:
            request: What to call.
            cancel_event: Optional event; setting it aborts the in-flight
                exchange and yields the timeout outcome.

        Returns:
            A RestResponse.  Never raises.
        """
        try:
            logger.info(
                "Sending %s request to PASOE: %s",
                request.http_method,
                request.service_path,
            )

            url = self.build_service_url(request.service_path)
            http_request = self._client.build_request(
                request.http_method,
                url,
                headers=self._merge_headers(request),
                content=request.request_body.encode("utf-8") if request.has_body else None,
            )

            http_response = await self._send(http_request, cancel_event)

            headers: dict[str, str] = {}
            for name, value in http_response.headers.multi_items():
                headers[name] = f"{headers[name]}, {value}" if name in headers else value

            status = http_response.status_code
            if 200 <= status <= 299:
                logger.info("PASOE request completed successfully")
                return RestResponse(
                    is_success=True,
                    status_code=status,
                    response_body=http_response.text,
                    headers=headers,
                )

            logger.warning(
                "PASOE request failed with status %s: %s",
                status,
                http_response.reason_phrase,
            )
            return RestResponse(
                is_success=False,
                status_code=status,
                response_body=http_response.text,
                error_message=f"HTTP {status}: {http_response.reason_phrase}",
                headers=headers,
            )

        except ConfigurationError as exc:
            logger.error("PASOE request not sent: %s", exc)
            return RestResponse.failure(str(exc))
        except (httpx.TimeoutException, asyncio.TimeoutError, RequestCancelled):
            logger.error("Request timed out")
            return RestResponse.failure("Request timed out")
        except httpx.HTTPError as exc:
            logger.error("HTTP request failed: %s", _describe(exc))
            return RestResponse.failure(f"HTTP request failed: {_describe(exc)}")
        except Exception as exc:
            logger.exception("Unexpected error during PASOE request")
            return RestResponse.failure(f"Unexpected error: {_describe(exc)}")

    async def test_connection(self, cancel_event: Optional[asyncio.Event] = None) -> bool:
        """Check that the web application root answers.

        Any answer other than 404 or 503 counts as connected, including
        401 and 403.  Errors of any kind count as not connected.
        """
        try:
            logger.info("Testing connection to PASOE at %s", self._config.base_url)

            http_request = self._client.build_request(
                "GET",
                self.build_service_url(""),
                headers=dict(self._default_headers),
            )
            http_response = await self._send(http_request, cancel_event)

            is_connected = http_response.status_code not in _UNREACHABLE_STATUSES
            logger.info(
                "Connection test result: %s (Status: %s)",
                is_connected,
                http_response.status_code,
            )
            return is_connected
        except Exception as exc:
            logger.error("Connection test failed: %s", _describe(exc))
            return False
