# =============================================================================
# core/config.py  —  Transport Configuration Loading
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Builds the one TransportConfig the process uses, from two sources:
#
#     1. appsettings.json, section "Pasoe"   (optional file)
#     2. PASOE_* environment variables       (win over the file)
#
#   main.py calls load_dotenv() first, so a local .env file feeds step 2.
#
# ENVIRONMENT VARIABLES:
#   PASOE_BASE_URL                          e.g. https://localhost:8810
#   PASOE_WEB_APP_NAME                      default "web"
#   PASOE_USERNAME / PASOE_PASSWORD         Basic auth (both required)
#   PASOE_TIMEOUT_SECONDS                   default 30
#   PASOE_ACCEPT_INVALID_SSL_CERTIFICATES   "true" to disable TLS checks
#   PASOE_SETTINGS_FILE                     path to the JSON settings file
#
# A missing base URL is NOT an error here.  The executor reports it per call
# as a status-0 response so the server still starts and can explain itself.
# =============================================================================

import json
import os
from pathlib import Path

from core.models import TransportConfig

DEFAULT_SETTINGS_FILE = "appsettings.json"
SETTINGS_SECTION = "Pasoe"

# TransportConfig field → (settings-file key, environment variable)
_KEYS: dict[str, tuple[str, str]] = {
    "base_url": ("BaseUrl", "PASOE_BASE_URL"),
    "web_app_name": ("WebAppName", "PASOE_WEB_APP_NAME"),
    "username": ("Username", "PASOE_USERNAME"),
    "password": ("Password", "PASOE_PASSWORD"),
    "timeout_seconds": ("TimeoutSeconds", "PASOE_TIMEOUT_SECONDS"),
    "accept_invalid_ssl_certificates": (
        "AcceptInvalidSslCertificates",
        "PASOE_ACCEPT_INVALID_SSL_CERTIFICATES",
    ),
}


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _parse_timeout(value) -> int:
    # bool is an int subclass, and int() truncates floats.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Timeout must be an integer number of seconds, got {value!r}")
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Timeout must be an integer number of seconds, got {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {seconds}")
    return seconds


def load_settings_file(path: str | os.PathLike | None = None) -> dict:
    """Read the "Pasoe" section of a JSON settings file.

    Returns an empty dict when the file does not exist.  A file that exists
    but is not valid JSON is a startup error and propagates.
    """
    settings_path = Path(path or os.environ.get("PASOE_SETTINGS_FILE", DEFAULT_SETTINGS_FILE))
    if not settings_path.is_file():
        return {}

    data = json.loads(settings_path.read_text(encoding="utf-8"))
    section = data.get(SETTINGS_SECTION, {}) if isinstance(data, dict) else {}
    if not isinstance(section, dict):
        raise ValueError(f"'{SETTINGS_SECTION}' in {settings_path} must be a JSON object")
    return section


def load_config(
    settings_file: str | os.PathLike | None = None,
    environ: dict[str, str] | None = None,
) -> TransportConfig:
    """Build the TransportConfig from the settings file and environment.

    Args:
        settings_file: Path to the JSON settings file.  Defaults to
            $PASOE_SETTINGS_FILE, then ./appsettings.json.
        environ: Environment mapping to read (defaults to os.environ).

    Returns:
        An immutable TransportConfig.

    Raises:
        ValueError: When the timeout is not a positive integer or the
            settings file is malformed.
    """
    env = os.environ if environ is None else environ
    file_values = load_settings_file(settings_file)

    values: dict = {}
    for name, (file_key, env_key) in _KEYS.items():
        if env.get(env_key) not in (None, ""):
            values[name] = env[env_key]
        elif file_values.get(file_key) is not None:
            values[name] = file_values[file_key]

    if "timeout_seconds" in values:
        values["timeout_seconds"] = _parse_timeout(values["timeout_seconds"])
    if "accept_invalid_ssl_certificates" in values:
        values["accept_invalid_ssl_certificates"] = _parse_bool(
            values["accept_invalid_ssl_certificates"]
        )
    for name in ("base_url", "web_app_name", "username", "password"):
        if name in values:
            values[name] = str(values[name])

    return TransportConfig(**values)
