"""
Google OAuth 2.0 client.

Builds the consent-screen redirect and, on callback, exchanges the
authorization code for an access token and fetches the user's profile.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import Request

from twex.config import Settings
from twex.schemas.auth_schema import GoogleProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthError(Exception):
    """Raised when Google rejects the code exchange or profile lookup"""


class GoogleOAuthClient:
    def __init__(
        self,
        settings: Settings,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self.transport = transport

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange an authorization code and return the signed-in profile"""
        token_data = {
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data=token_data,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                token_response = response.json()
                if not isinstance(token_response, dict):
                    raise OAuthError("Unexpected token response")

                access_token = token_response.get("access_token")
                if not access_token:
                    raise OAuthError(token_response.get("error_description", "No access token returned"))

                user_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                user_response.raise_for_status()
                userinfo = user_response.json()

            if not isinstance(userinfo, dict) or not userinfo.get("email"):
                raise OAuthError("Google profile has no email")

            profile = GoogleProfile(
                email=userinfo["email"],
                name=userinfo.get("name"),
                picture=userinfo.get("picture"),
            )
        except httpx.HTTPError as e:
            raise OAuthError(f"Google request failed: {e}") from e
        except ValueError as e:
            # Non-JSON body or a malformed email address
            raise OAuthError(f"Google returned an unreadable response: {e}") from e

        logger.info(f"Fetched Google profile for {profile.email}")
        return profile


def get_google_client(request: Request) -> GoogleOAuthClient:
    """Dependency returning the Google client for the running app"""
    return GoogleOAuthClient(request.app.state.settings)
