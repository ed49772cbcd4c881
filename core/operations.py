# =============================================================================
# core/operations.py  —  Operation Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Implements the six named PASOE operations that tools/mcp_server.py
#   exposes over MCP.  Each one:
#     1. turns loosely-typed string arguments into a RestRequest
#     2. hands it to the executor (anything matching core.interfaces.RestClient)
#     3. shapes the RestResponse into a fixed JSON envelope
#
# ENVELOPES (pretty-printed JSON, indent 2):
#
#   call_service   {success, statusCode, response, errorMessage, headers}
#   get_data       {success, statusCode, data,     errorMessage}
#   invoke_method  {success, statusCode, result,   errorMessage}
#   update_data    {success, statusCode, result,   errorMessage}
#   delete_data    {success, statusCode, result,   errorMessage}
#   test_connection {success, message}
#
#   Any failure before or around the executor (bad JSON arguments, an
#   unsupported method, a missing payload) returns
#   {success: false, statusCode: 0, errorMessage: "<prefix><detail>"}.
#
# Nothing in here raises to the caller.  The five REST operations share one
# code path (_dispatch); they differ only in method, body rule, the kind of
# extra argument they accept and the envelope they produce.
# =============================================================================

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from core.errors import InvalidInputError
from core.interfaces import RestClient
from core.models import DEFAULT_METHOD, RestRequest

logger = logging.getLogger(__name__)

CONNECTED_MESSAGE = "Successfully connected to PASOE"
NOT_CONNECTED_MESSAGE = "Failed to connect to PASOE"


def to_json(envelope: dict) -> str:
    """Serialize an envelope the way every operation returns it."""
    return json.dumps(envelope, indent=2)


def parse_string_map(text: Optional[str], what: str = "parameters") -> dict[str, str]:
    """Parse a flat JSON object of string values.

    Empty input and JSON null both mean "no entries".

    Raises:
        InvalidInputError: When the text is not a JSON object of strings.
    """
    if text is None or not text.strip():
        return {}

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid {what} JSON: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise InvalidInputError(
            f"Invalid {what} JSON: expected an object, got {type(parsed).__name__}"
        )

    result: dict[str, str] = {}
    for key, value in parsed.items():
        if not isinstance(value, str):
            raise InvalidInputError(
                f"Invalid {what} JSON: value for '{key}' must be a string"
            )
        result[key] = value
    return result


def append_query_string(path: str, params: dict[str, str]) -> str:
    """Percent-encode params and append them to path.

    >>> append_query_string("/rest/Svc/Customer", {"id": "123"})
    '/rest/Svc/Customer?id=123'
    >>> append_query_string("/rest/Svc/Customer?a=1", {"id": "123"})
    '/rest/Svc/Customer?a=1&id=123'
    """
    if not params:
        return path

    query = "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in params.items()
    )
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"


# -----------------------------------------------------------------------------
# Per-operation shape
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OperationSpec:
    """Everything that distinguishes one REST operation from another."""

    name: str
    payload_key: str                   # "response", "data" or "result"
    error_prefix: str                  # Prefix for caller-side failures
    body_required: bool = False
    include_headers: bool = False


CALL_SERVICE = OperationSpec(
    "call_service", "response", "Error calling PASOE service: ", include_headers=True
)
GET_DATA = OperationSpec("get_data", "data", "Error retrieving data: ")
INVOKE_METHOD = OperationSpec(
    "invoke_method", "result", "Error invoking method: ", body_required=True
)
UPDATE_DATA = OperationSpec(
    "update_data", "result", "Error updating data: ", body_required=True
)
DELETE_DATA = OperationSpec("delete_data", "result", "Error deleting data: ")


class PasoeOperations:
    """The six operations offered to MCP callers.

    Args:
        client: The executor.  Usually a core.rest_client.PasoeRestClient.
    """

    def __init__(self, client: RestClient) -> None:
        self._client = client

    @property
    def client(self) -> RestClient:
        return self._client

    async def aclose(self) -> None:
        """Release the executor's connections."""
        await self._client.aclose()

    async def _dispatch(
        self,
        spec: OperationSpec,
        *,
        service_path: str,
        http_method: str,
        request_body: Optional[str] = None,
        headers: Optional[str] = None,
        query_params: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        try:
            if spec.body_required and not request_body:
                raise InvalidInputError("A request payload is required")

            path = append_query_string(
                service_path or "", parse_string_map(query_params, "query parameters")
            )
            request = RestRequest(
                service_path=path,
                http_method=http_method,
                request_body=request_body,
                headers=parse_string_map(headers, "headers"),
            )

            response = await self._client.send_request(request, cancel_event)

            envelope = {
                "success": response.is_success,
                "statusCode": response.status_code,
                spec.payload_key: response.response_body,
                "errorMessage": response.error_message,
            }
            if spec.include_headers:
                envelope["headers"] = response.headers
            return to_json(envelope)

        except Exception as exc:
            logger.warning("%s failed before completion: %s", spec.name, exc)
            return to_json({
                "success": False,
                "statusCode": 0,
                "errorMessage": f"{spec.error_prefix}{exc}",
            })

    # -------------------------------------------------------------------------
    # The six operations
    # -------------------------------------------------------------------------
    async def call_service(
        self,
        service_path: str,
        http_method: str = DEFAULT_METHOD,
        request_body: Optional[str] = None,
        headers: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Generic call: any supported method, optional body and headers."""
        return await self._dispatch(
            CALL_SERVICE,
            service_path=service_path,
            http_method=http_method,
            request_body=request_body,
            headers=headers,
            cancel_event=cancel_event,
        )

    async def test_connection(self, cancel_event: Optional[asyncio.Event] = None) -> str:
        try:
            is_connected = await self._client.test_connection(cancel_event)
            return to_json({
                "success": is_connected,
                "message": CONNECTED_MESSAGE if is_connected else NOT_CONNECTED_MESSAGE,
            })
        except Exception as exc:
            logger.warning("test_connection failed before completion: %s", exc)
            return to_json({
                "success": False,
                "message": f"Connection test error: {exc}",
            })

    async def get_data(
        self,
        service_path: str,
        query_params: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """GET with optional query parameters appended to the path."""
        return await self._dispatch(
            GET_DATA,
            service_path=service_path,
            http_method="GET",
            query_params=query_params,
            cancel_event=cancel_event,
        )

    async def invoke_method(
        self,
        service_path: str,
        request_payload: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        return await self._dispatch(
            INVOKE_METHOD,
            service_path=service_path,
            http_method="POST",
            request_body=request_payload,
            cancel_event=cancel_event,
        )

    async def update_data(
        self,
        service_path: str,
        request_payload: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        return await self._dispatch(
            UPDATE_DATA,
            service_path=service_path,
            http_method="PUT",
            request_body=request_payload,
            cancel_event=cancel_event,
        )

    async def delete_data(
        self,
        service_path: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        return await self._dispatch(
            DELETE_DATA,
            service_path=service_path,
            http_method="DELETE",
            cancel_event=cancel_event,
        )
