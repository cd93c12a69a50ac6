"""
Server configuration for the Sheets/Drive tool server.

OAuth client settings live in auth.oauth_config; this module holds the
HTTP-level settings. Both are plain objects passed to create_app().
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Largest decoded upload accepted by drive_upload_file
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Base64 inflates by 4/3; leave headroom for the JSON envelope around an upload
MAX_REQUEST_BODY_BYTES = 15 * 1024 * 1024

SERVER_NAME = "mcp-google-tools"
SERVER_VERSION = "1.0.0"


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: Tuple[str, ...] = ("*",)
    max_request_body_bytes: int = MAX_REQUEST_BODY_BYTES
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ServerConfig":
        """
        Read PORT (or SHEETS_TOOLS_PORT), SHEETS_TOOLS_HOST, SHEETS_TOOLS_ALLOWED_ORIGINS
        (comma separated) and SHEETS_TOOLS_LOG_LEVEL.

        Raises:
            ValueError: If the port is not an integer.
        """
        env = os.environ if environ is None else environ

        origins = env.get("SHEETS_TOOLS_ALLOWED_ORIGINS")
        allowed_origins = (
            tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else ("*",)
        )

        raw_port = env.get("PORT", env.get("SHEETS_TOOLS_PORT", "3000"))
        try:
            port = int(raw_port)
        except ValueError as e:
            raise ValueError(f"PORT must be an integer, got {raw_port!r}") from e

        return cls(
            host=env.get("SHEETS_TOOLS_HOST", "0.0.0.0"),
            port=port,
            allowed_origins=allowed_origins,
            log_level=env.get("SHEETS_TOOLS_LOG_LEVEL", "INFO").upper(),
        )
