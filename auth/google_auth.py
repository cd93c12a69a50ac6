# auth/google_auth.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google_auth_oauthlib.flow import Flow

from auth.oauth_config import OAuthConfig

logger = logging.getLogger(__name__)

# Reported when Google does not return an expiry with the token
DEFAULT_EXPIRES_IN = 3600


class OAuthExchangeError(Exception):
    """Raised when the authorization code could not be exchanged for tokens."""


def create_oauth_flow(config: OAuthConfig, state: Optional[str] = None) -> Flow:
    """Creates an OAuth flow from the explicit client configuration."""
    flow = Flow.from_client_config(
        config.to_client_config(),
        scopes=list(config.scopes),
        redirect_uri=config.redirect_uri,
        state=state,
    )
    logger.debug(f"Created OAuth flow for client {config.client_id[:8]}...")
    return flow


def _seconds_until(expiry: Optional[datetime]) -> int:
    if expiry is None:
        return DEFAULT_EXPIRES_IN
    # google-auth keeps expiry as a naive UTC datetime
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return int((expiry - now).total_seconds())


def exchange_code_for_tokens(config: OAuthConfig, code: str) -> Dict[str, Any]:
    """
    Exchanges an authorization code for tokens against Google's token endpoint.

    Args:
        config: OAuth client configuration.
        code: The authorization code received on the redirect URI.

    Returns:
        dict with access_token, refresh_token and expires_in (seconds).

    Raises:
        OAuthExchangeError: If the code exchange fails.
    """
    flow = create_oauth_flow(config)
    try:
        flow.fetch_token(code=code)
    except Exception as e:
        logger.error(f"Error exchanging code for tokens: {e}")
        raise OAuthExchangeError(str(e)) from e

    credentials = flow.credentials
    logger.info("Successfully exchanged authorization code for tokens.")
    return {
        "access_token": credentials.token,
        "refresh_token": credentials.refresh_token,
        "expires_in": _seconds_until(credentials.expiry),
    }
