# =============================================================================
# main.py  —  Entry Point for the PASOE REST MCP server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py        (or the installed `pasoe-mcp` script)
#
# WHAT HAPPENS:
#   1. Loads .env into the environment (PASOE_BASE_URL, PASOE_USERNAME, ...)
#   2. Builds the TransportConfig from appsettings.json + environment
#   3. Creates the REST client and the operations layer
#   4. Serves the MCP tools over stdio until the client disconnects
#   5. On shutdown the server lifespan closes the REST client
#
# An MCP client (Claude Desktop, an ADK agent, the MCP inspector, ...) starts
# this process and talks to it over stdin/stdout.  Logs go to stderr.
# =============================================================================

from dotenv import load_dotenv

# Must run before core.config reads the environment.
load_dotenv()

from core.config import load_config
from core.operations import PasoeOperations
from core.rest_client import PasoeRestClient
from tools.mcp_server import configure, mcp


def main() -> None:
    """Load configuration, wire the tools and run the stdio server."""
    config = load_config()
    configure(PasoeOperations(PasoeRestClient(config)))
    mcp.run()


if __name__ == "__main__":
    main()
