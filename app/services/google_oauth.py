"""
LearnLoop Backend - Google OAuth Client
=======================================

What:  Exchanges a Google authorization code for the user's identity.
How:   POST the code to Google's token endpoint (authorization_code grant),
       then GET the OpenID userinfo endpoint with the returned access token.
       Both calls use httpx.AsyncClient so the event loop is never blocked.
Who:   Called by AuthService.google_login().

Failure mapping:
    - token endpoint rejects the code      → OAuthError (400)
    - userinfo has no email                → OAuthError (400)
    - Google unreachable (network/timeout) → OAuthError (400)
"""

import logging
from typing import Any, Dict

import httpx

from app.config import settings
from app.exceptions import OAuthError

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """Thin async wrapper around Google's OAuth2 code exchange."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or settings.oauth_timeout_seconds

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Returns the userinfo claims (`email`, `name`, ...) for an authorization code.

        Raises:
            OAuthError: code rejected, network failure, or no email in claims.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                token_response = await client.post(
                    settings.google_token_url,
                    data={
                        "code": code,
                        "client_id": settings.google_client_id,
                        "client_secret": settings.google_client_secret,
                        "redirect_uri": settings.google_redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                if token_response.status_code != 200:
                    logger.warning(
                        "Google token exchange failed: HTTP %d", token_response.status_code
                    )
                    raise OAuthError(
                        message="Failed to retrieve tokens from Google",
                        context={"status": token_response.status_code},
                    )

                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise OAuthError(message="Failed to retrieve tokens from Google")

                userinfo_response = await client.get(
                    settings.google_userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error("Google OAuth request failed: %s", str(e))
            raise OAuthError(
                message="Could not reach Google to verify the login",
                context={"error_type": type(e).__name__},
            )

        if userinfo_response.status_code != 200:
            raise OAuthError(
                message="Failed to fetch Google profile",
                context={"status": userinfo_response.status_code},
            )

        claims = userinfo_response.json()
        if not claims.get("email"):
            raise OAuthError(message="Google account has no email address")
        return claims


google_oauth_client = GoogleOAuthClient()
