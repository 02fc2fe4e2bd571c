"""
Verification of Google-issued identity assertions.

Assertions are either Google Sign-In ID tokens (audience = GOOGLE_CLIENT_ID)
or Firebase Authentication ID tokens (audience = FIREBASE_PROJECT_ID).
"""

import logging
from functools import lru_cache
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)


class FederatedIdentityError(Exception):
    """The assertion could not be verified."""


class FederatedIdentity(BaseModel):
    subject: str
    email: str
    name: Optional[str] = None


class GoogleIdentityVerifier:
    def __init__(
        self,
        client_id: Optional[str] = None,
        firebase_project_id: Optional[str] = None,
    ):
        self.client_id = client_id
        self.firebase_project_id = firebase_project_id
        self._request = google_requests.Request()

    def verify(self, assertion: str) -> FederatedIdentity:
        """Verify signature, audience and expiry, and return the asserted identity."""
        if not self.client_id and not self.firebase_project_id:
            raise FederatedIdentityError("Google sign-in is not configured")

        try:
            if self.firebase_project_id:
                claims = id_token.verify_firebase_token(
                    assertion, self._request, audience=self.firebase_project_id
                )
            else:
                claims = id_token.verify_oauth2_token(
                    assertion, self._request, audience=self.client_id
                )
        except (ValueError, GoogleAuthError) as e:
            raise FederatedIdentityError(str(e)) from e

        if not claims or not claims.get("sub") or not claims.get("email"):
            raise FederatedIdentityError("Assertion is missing subject or email")
        if claims.get("email_verified") is False:
            raise FederatedIdentityError("Email address is not verified")

        return FederatedIdentity(
            subject=claims["sub"], email=claims["email"], name=claims.get("name")
        )


@lru_cache
def get_identity_verifier() -> GoogleIdentityVerifier:
    """Shared verifier instance, injected into the google-login route."""
    if not settings.google_sign_in_configured:
        logger.warning("Google sign-in requested but no client id is configured")
    return GoogleIdentityVerifier(
        client_id=settings.GOOGLE_CLIENT_ID,
        firebase_project_id=settings.FIREBASE_PROJECT_ID,
    )
