# castbridge/core/errors.py
from __future__ import annotations


class CastBridgeError(Exception):
    """
    Base class for all expected setup errors in castbridge.

    The command path never raises; these are reserved for configuration
    and receiver connection.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, channel replies, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration errors (no receiver access yet)
# ---------------------------------------------------------------------------

class BridgeConfigError(CastBridgeError):
    """
    Bridge configuration is invalid.

    Examples:
      - config file missing or not valid YAML
      - unknown config key
      - value of the wrong type
    """
    code = "bridge_config_error"


# ---------------------------------------------------------------------------
# Receiver connection errors
# ---------------------------------------------------------------------------

class DeviceNotFoundError(CastBridgeError):
    """
    No receiver with the requested friendly name answered discovery.
    """
    code = "device_not_found"


class DeviceConnectError(CastBridgeError):
    """
    Receiver was found but the connection could not be established.

    Examples:
      - receiver did not become ready within the connect timeout
      - socket error while opening the cast channel
    """
    code = "device_connect_error"
