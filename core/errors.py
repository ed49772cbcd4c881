# =============================================================================
# core/errors.py  —  Exception types
# =============================================================================
#
# None of these ever reach the MCP caller.  The executor turns
# ConfigurationError into a status-0 RestResponse and the dispatcher turns
# InvalidInputError (and anything else) into a failure envelope.
# =============================================================================


class PasoeError(Exception):
    """Base class for errors raised inside the bridge."""


class ConfigurationError(PasoeError):
    """Required transport configuration is missing or invalid."""


class InvalidInputError(PasoeError, ValueError):
    """A tool argument could not be turned into a request."""
