# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL of the REST bridging logic:
#
#   models.py       → TransportConfig, RestRequest, RestResponse
#   config.py       → loads TransportConfig from appsettings.json + PASOE_* env
#   errors.py       → exception types (never seen by MCP callers)
#   interfaces.py   → RestClient Protocol
#   rest_client.py  → PasoeRestClient, the Request Executor (httpx)
#   operations.py   → PasoeOperations, the six named operations + envelopes
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  The MCP server in tools/ is
#   only wiring; every operation here can be driven from plain asyncio code.
# =============================================================================
