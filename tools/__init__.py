# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  Each tool:
#     1. Logs the incoming call
#     2. Delegates to a core.operations.PasoeOperations method
#     3. Returns the JSON envelope unchanged
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT build URLs or talk HTTP (core/rest_client.py does)
#   - They do NOT parse arguments or shape envelopes (core/operations.py does)
#
# Each tool has a descriptive name, typed string parameters and a docstring
# describing the envelope it returns; MCP clients read all three.
# =============================================================================
