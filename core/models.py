# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the bridge)
# =============================================================================
#
# Three dataclasses describe everything that flows through the system:
#
#   TransportConfig  →  how to reach the PASOE server (built once at startup)
#   RestRequest      →  one logical "call this REST operation" description
#   RestResponse     →  the normalized outcome of exactly one HTTP exchange
#
# All three are frozen.  A request is built per call by the dispatcher and a
# response is produced once per call by the executor; neither is mutated
# afterwards, so concurrent tool calls never share scratch state.
# =============================================================================

from dataclasses import dataclass, field
from typing import Optional

# Methods the PASOE REST transport understands.
SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
DEFAULT_METHOD = "POST"


# -----------------------------------------------------------------------------
# TransportConfig — where the server lives and how we talk to it
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TransportConfig:
    """Connection settings for one PASOE instance.

    Loaded by core/config.py and owned by the executor for the lifetime of
    the process.
    """

    base_url: str = ""                 # e.g. "https://localhost:8810"
    web_app_name: str = "web"          # PASOE web application (context segment)
    username: Optional[str] = None     # Basic auth user
    password: Optional[str] = field(default=None, repr=False)
    timeout_seconds: int = 30          # Applies to connect/read/write/pool

    # --- Unsafe escape hatch ---
    # Only an explicit True turns off certificate checks.  Development and
    # test servers with self-signed certificates only.
    accept_invalid_ssl_certificates: bool = False

    @property
    def has_credentials(self) -> bool:
        """True when both halves of the Basic credential are configured."""
        return bool(self.username) and bool(self.password)


# -----------------------------------------------------------------------------
# RestRequest — what the dispatcher hands to the executor
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RestRequest:
    """A single REST call against the configured web application."""

    service_path: str = ""             # Relative to the context, e.g. "/rest/Svc/Customer"
    http_method: str = DEFAULT_METHOD  # GET / POST / PUT / DELETE, any case
    request_body: Optional[str] = None # Sent verbatim as application/json
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        method = (self.http_method or "").strip().upper() or DEFAULT_METHOD
        if method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unsupported HTTP method '{self.http_method}'. "
                f"Expected one of: {', '.join(SUPPORTED_METHODS)}"
            )
        # frozen dataclass: bypass __setattr__ to store the normalized value
        object.__setattr__(self, "http_method", method)
        object.__setattr__(self, "service_path", self.service_path or "")
        object.__setattr__(self, "headers", dict(self.headers or {}))

    @property
    def has_body(self) -> bool:
        return bool(self.request_body)


# -----------------------------------------------------------------------------
# RestResponse — the normalized outcome
# -----------------------------------------------------------------------------
# status_code 0 is reserved for "no response received" (configuration
# problem, transport failure, timeout, cancellation).
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RestResponse:
    """Outcome of one outbound HTTP exchange.

    Exactly one of these holds:
      - is_success is True, status is 2xx and error_message is None
      - is_success is False and error_message is a non-empty string
    """

    is_success: bool
    status_code: int
    response_body: Optional[str] = None
    error_message: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.is_success:
            if self.error_message is not None:
                raise ValueError("A successful response cannot carry an error message")
            if not 200 <= self.status_code <= 299:
                raise ValueError(f"Status {self.status_code} is not a success status")
        elif not self.error_message:
            raise ValueError("A failed response must carry an error message")

    @classmethod
    def failure(cls, message: str) -> "RestResponse":
        """Build the 'no response received' outcome."""
        return cls(is_success=False, status_code=0, error_message=message)
