# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the MCP tools a client can call to reach a PASOE REST service.
#   Each tool is a thin wrapper around a core.operations.PasoeOperations
#   method. The wrapper logs the call and returns the JSON envelope as-is.
#
# HOW IT WORKS (the flow):
#   1. An MCP client calls a tool by name (e.g. "get_pasoe_data")
#   2. FastMCP routes the call to the decorated function below
#   3. The function calls PasoeOperations, which builds the request,
#      sends it through PasoeRestClient and shapes the result
#   4. The client receives a pretty-printed JSON envelope
#
# TOOLS:
#   call_pasoe_service     → any method, optional body + headers
#   test_pasoe_connection  → reachability probe
#   get_pasoe_data         → GET with optional query parameters
#   invoke_pasoe_method    → POST with a payload
#   update_pasoe_data      → PUT with a payload
#   delete_pasoe_data      → DELETE
#
# RUNNING THIS SERVER:
#     a) Via the entry point:  python main.py
#     b) Standalone:           python -m tools.mcp_server
#   Both use the stdio transport.
# =============================================================================

import json
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastmcp import FastMCP

from core.config import load_config
from core.operations import PasoeOperations
from core.rest_client import PasoeRestClient

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR.  STDOUT is the MCP transport; anything else written
# there corrupts the protocol stream.
#
# Colours:  CYAN = incoming call,  YELLOW = status,  GREEN = response
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color


def _resolve_log_level(name: Optional[str]) -> int:
    """Map a level name such as "debug" to its number.  Unknown names mean INFO."""
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(
    level=_resolve_log_level(os.environ.get("PASOE_LOG_LEVEL")),
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: str) -> str:
    """Log the envelope outcome in GREEN, then return the envelope unchanged.

    Only success/statusCode are logged; response bodies can be large and
    may hold business data.
    """
    try:
        envelope = json.loads(result)
        summary = {k: envelope[k] for k in ("success", "statusCode") if k in envelope}
    except (ValueError, TypeError):
        summary = {"unparsable": True}
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(summary, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Operations wiring
# =============================================================================
# main.py installs a PasoeOperations built from the loaded configuration.
# When the module is run on its own, the first tool call builds one.
# Server shutdown closes whichever one is installed.
# =============================================================================
_operations: Optional[PasoeOperations] = None


def configure(operations: PasoeOperations) -> None:
    """Install the PasoeOperations instance the tools delegate to."""
    global _operations
    _operations = operations


def get_operations() -> PasoeOperations:
    global _operations
    if _operations is None:
        _log_status("No operations configured, loading transport configuration")
        _operations = PasoeOperations(PasoeRestClient(load_config()))
    return _operations


async def shutdown() -> None:
    """Close the installed operations' HTTP client and forget it."""
    global _operations
    if _operations is not None:
        _log_status("Closing PASOE REST client")
        operations, _operations = _operations, None
        await operations.aclose()


@asynccontextmanager
async def _lifespan(server: FastMCP) -> AsyncIterator[dict]:
    try:
        yield {}
    finally:
        await shutdown()


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP("pasoe-rest", lifespan=_lifespan)


@mcp.tool()
async def call_pasoe_service(
    service_path: str,
    http_method: str = "POST",
    request_body: Optional[str] = None,
    headers: Optional[str] = None,
) -> str:
    """Call a PASOE REST service endpoint with the specified parameters.

    Args:
        service_path: The service path, e.g. '/rest/CustomersService/MyMethod'.
        http_method: GET, POST, PUT or DELETE (default: POST).
        request_body: Request body as a JSON string (optional).
        headers: Additional headers as a JSON object (optional),
            e.g. '{"X-Custom-Header": "value"}'.

    Returns:
        JSON with success, statusCode, response, errorMessage and headers.
    """
    _log_request("call_pasoe_service",
                 service_path=service_path, http_method=http_method,
                 has_body=bool(request_body), has_headers=bool(headers))
    result = await get_operations().call_service(
        service_path, http_method, request_body, headers
    )
    return _log_response("call_pasoe_service", result)


@mcp.tool()
async def test_pasoe_connection() -> str:
    """Test the connection to the configured PASOE instance.

    Returns:
        JSON with success and a human-readable message.
    """
    _log_request("test_pasoe_connection")
    result = await get_operations().test_connection()
    return _log_response("test_pasoe_connection", result)


@mcp.tool()
async def get_pasoe_data(service_path: str, query_params: Optional[str] = None) -> str:
    """Make a GET request to retrieve data from a PASOE REST service.

    Args:
        service_path: The service path, e.g. '/rest/CustomersService/Customer'.
        query_params: Query parameters as a JSON object (optional),
            e.g. '{"id": "123"}'.

    Returns:
        JSON with success, statusCode, data and errorMessage.
    """
    _log_request("get_pasoe_data", service_path=service_path, query_params=query_params)
    result = await get_operations().get_data(service_path, query_params)
    return _log_response("get_pasoe_data", result)


@mcp.tool()
async def invoke_pasoe_method(service_path: str, request_payload: str) -> str:
    """Make a POST request to invoke an ABL procedure or create data in PASOE.

    Args:
        service_path: The service path, e.g. '/rest/CustomersService/Customer'.
        request_payload: Request payload as a JSON string.

    Returns:
        JSON with success, statusCode, result and errorMessage.
    """
    _log_request("invoke_pasoe_method", service_path=service_path)
    result = await get_operations().invoke_method(service_path, request_payload)
    return _log_response("invoke_pasoe_method", result)


@mcp.tool()
async def update_pasoe_data(service_path: str, request_payload: str) -> str:
    """Make a PUT request to update data in PASOE.

    Args:
        service_path: The service path, e.g. '/rest/CustomersService/Customer/123'.
        request_payload: Update payload as a JSON string.

    Returns:
        JSON with success, statusCode, result and errorMessage.
    """
    _log_request("update_pasoe_data", service_path=service_path)
    result = await get_operations().update_data(service_path, request_payload)
    return _log_response("update_pasoe_data", result)


@mcp.tool()
async def delete_pasoe_data(service_path: str) -> str:
    """Make a DELETE request to remove data in PASOE.

    Args:
        service_path: The service path, e.g. '/rest/CustomersService/Customer/123'.

    Returns:
        JSON with success, statusCode, result and errorMessage.
    """
    _log_request("delete_pasoe_data", service_path=service_path)
    result = await get_operations().delete_data(service_path)
    return _log_response("delete_pasoe_data", result)


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    mcp.run()
