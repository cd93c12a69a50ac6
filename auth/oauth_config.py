"""
OAuth Configuration Management

This module centralizes OAuth-related configuration. The configuration is an
explicit, immutable object handed to the server at construction time; only
`OAuthConfig.from_env()` reads the process environment.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from auth.scopes import SCOPES

# Placeholders used when a value is not configured
DEFAULT_CLIENT_ID = "your-google-client-id"
DEFAULT_CLIENT_SECRET = "your-google-client-secret"
DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_REDIRECT_URI = "http://localhost:3000/oauth/callback"


@dataclass(frozen=True)
class OAuthConfig:
    """
    OAuth client settings for the Google authorization server.

    Attributes:
        client_id: OAuth client ID. Defaults to a placeholder.
        client_secret: OAuth client secret. Defaults to a placeholder.
        auth_uri: Google's authorization endpoint.
        token_uri: Google's token endpoint.
        redirect_uris: Allowed redirect URIs; the first one is used for code exchange.
        scopes: Scopes requested from the user.
    """

    client_id: str = DEFAULT_CLIENT_ID
    client_secret: str = DEFAULT_CLIENT_SECRET
    auth_uri: str = DEFAULT_AUTH_URI
    token_uri: str = DEFAULT_TOKEN_URI
    redirect_uris: Tuple[str, ...] = (DEFAULT_REDIRECT_URI,)
    scopes: Tuple[str, ...] = field(default_factory=lambda: tuple(SCOPES))

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "OAuthConfig":
        """
        Build a configuration from environment variables.

        Recognized variables: GOOGLE_OAUTH_CLIENT_ID, GOOGLE_OAUTH_CLIENT_SECRET,
        GOOGLE_OAUTH_REDIRECT_URI and OAUTH_CUSTOM_REDIRECT_URIS (comma separated).
        """
        env = os.environ if environ is None else environ

        redirect_uris: List[str] = [env.get("GOOGLE_OAUTH_REDIRECT_URI") or DEFAULT_REDIRECT_URI]
        custom_uris = env.get("OAUTH_CUSTOM_REDIRECT_URIS")
        if custom_uris:
            redirect_uris.extend([uri.strip() for uri in custom_uris.split(",") if uri.strip()])

        return cls(
            client_id=env.get("GOOGLE_OAUTH_CLIENT_ID") or DEFAULT_CLIENT_ID,
            client_secret=env.get("GOOGLE_OAUTH_CLIENT_SECRET") or DEFAULT_CLIENT_SECRET,
            redirect_uris=tuple(dict.fromkeys(redirect_uris)),
        )

    @property
    def redirect_uri(self) -> str:
        """The primary redirect URI."""
        return self.redirect_uris[0]

    def with_scopes(self, scopes: List[str]) -> "OAuthConfig":
        """Return a copy requesting only the given scopes."""
        return replace(self, scopes=tuple(scopes))

    def is_configured(self) -> bool:
        """True when real client credentials were supplied."""
        return (
            self.client_id != DEFAULT_CLIENT_ID
            and self.client_secret != DEFAULT_CLIENT_SECRET
        )

    def to_client_config(self) -> Dict[str, Any]:
        """Client config in the shape google_auth_oauthlib expects."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": list(self.redirect_uris),
            }
        }

    def public_parameters(self) -> Dict[str, Any]:
        """Parameters a client needs to start the authorization code flow. Excludes the secret."""
        return {
            "client_id": self.client_id,
            "auth_uri": self.auth_uri,
            "token_uri": self.token_uri,
            "redirect_uris": list(self.redirect_uris),
            "scopes": list(self.scopes),
            "response_type": "code",
            "access_type": "offline",
            "prompt": "consent",
        }

    def get_environment_summary(self) -> dict:
        """
        Get a summary of the current OAuth configuration.

        Returns:
            Dictionary with configuration summary (excluding secrets)
        """
        return {
            "client_configured": self.is_configured(),
            "redirect_uri": self.redirect_uri,
            "total_redirect_uris": len(self.redirect_uris),
            "total_scopes": len(self.scopes),
        }
