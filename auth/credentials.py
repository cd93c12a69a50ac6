"""
Per-request Google credentials.

Every tool call carries its own OAuth access token in the Authorization header.
The token is used verbatim to build fresh Sheets and Drive clients for that
request; nothing is cached between requests.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from core.errors import MalformedCredentialError, MissingCredentialError

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)

# Service configuration mapping
SERVICE_CONFIGS = {
    "sheets": {"service": "sheets", "version": "v4"},
    "drive": {"service": "drive", "version": "v3"},
}


@dataclass(frozen=True)
class GoogleClients:
    """The authenticated client bundle handed to every tool handler."""

    sheets: Any
    drive: Any


def get_bearer_token(authorization_header: Optional[str]) -> str:
    """
    Extract the access token from an Authorization header value.

    Raises:
        MissingCredentialError: If the header is absent or empty.
        MalformedCredentialError: If the header is not 'Bearer <token>'.
    """
    if not authorization_header:
        raise MissingCredentialError("Missing Authorization header")

    match = _BEARER_RE.match(authorization_header.strip())
    if not match:
        raise MalformedCredentialError("Invalid Authorization header format")
    return match.group(1)


def build_google_clients(access_token: str) -> GoogleClients:
    """Build Sheets and Drive clients authorized with the caller's access token."""
    credentials = Credentials(token=access_token)
    services = {
        name: build(config["service"], config["version"], credentials=credentials, cache_discovery=False)
        for name, config in SERVICE_CONFIGS.items()
    }
    logger.debug(f"Built per-request Google clients for services: {', '.join(services)}")
    return GoogleClients(sheets=services["sheets"], drive=services["drive"])
