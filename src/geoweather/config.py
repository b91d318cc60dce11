"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables of the service in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m geoweather --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── GEOWEATHER_PORT=3000 python -m geoweather                  │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


def parse_timeout(value: str) -> Optional[float]:
    """
    Read a timeout setting. "none" or "0" mean no timeout (block forever).

    Raises:
        ValueError: If the value is not a number.
    """
    if value.strip().lower() in ("none", "0"):
        return None
    return float(value)


@dataclass
class ServerConfig:
    """
    Configuration for the geo/weather server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    REQUEST LIMITS
    - max_method_length, max_target_length

    LOGGING
    - log_level, log_format

    DATA
    - dataset_path

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to. All interfaces by default."""

    port: int = 8080

    backlog: int = 16
    """Maximum number of queued connections."""

    buffer_size: int = 8192
    """Most bytes read from a client before the request is parsed."""

    timeout: Optional[float] = 30.0
    """
    Client socket timeout in seconds.
    None = blocking (a silent client holds the server forever).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────
    # Longer values are truncated, not rejected.

    max_method_length: int = 15
    max_target_length: int = 255

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # DATA
    # ─────────────────────────────────────────────────────────────────────

    dataset_path: Optional[str] = None
    """JSON file replacing the built-in locations. None keeps the defaults."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        GEOWEATHER_HOST       Server host (default: 0.0.0.0)
        GEOWEATHER_PORT       Server port (default: 8080)
        GEOWEATHER_TIMEOUT    Client socket timeout in seconds (default: 30;
                              "none" or "0" for no timeout)
        GEOWEATHER_LOG_LEVEL  Logging level (default: INFO)
        GEOWEATHER_DATASET    Locations JSON file (default: built-in)

        =====================================================================
        """
        return cls(
            host=os.getenv("GEOWEATHER_HOST", "0.0.0.0"),
            port=int(os.getenv("GEOWEATHER_PORT", "8080")),
            timeout=parse_timeout(os.getenv("GEOWEATHER_TIMEOUT", "30")),
            log_level=os.getenv("GEOWEATHER_LOG_LEVEL", "INFO").upper(),
            dataset_path=os.getenv("GEOWEATHER_DATASET") or None,
        )

    def validate(self) -> None:
        """Raise ValueError on the first invalid value."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_method_length < 1 or self.max_target_length < 1:
            raise ValueError("request limits must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}. Must be 'text' or 'json'.")
