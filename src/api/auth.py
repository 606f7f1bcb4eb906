"""Auth capability backed by Supabase Auth.

The content layer only needs a handful of operations from the auth provider:
session lookup, current user, magic-link sign in, sign out, and a boolean
"is the caller authenticated" check that never raises.

Prerequisites:
    - SUPABASE_URL and SUPABASE_ANON_KEY in .env
      (NEXT_PUBLIC_SUPABASE_URL / NEXT_PUBLIC_SUPABASE_ANON_KEY also accepted)

Usage:
    from src.api.auth import AuthService

    auth = AuthService()
    if auth.is_authenticated():
        print(auth.get_user())
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.common.config import get_supabase_credentials

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when an auth provider call fails."""


class AuthService:
    """Thin wrapper over the Supabase auth client."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client: Any = None,
    ):
        self._url = supabase_url
        self._key = supabase_key
        self._client = client  # Lazy init when None

    def _get_client(self):
        """Lazy-initialize Supabase client.

        Raises:
            ValueError: If the Supabase URL or key is not configured.
        """
        if self._client is not None:
            return self._client
        if not self._url or not self._key:
            self._url, self._key = get_supabase_credentials()
        from supabase import create_client

        self._client = create_client(self._url, self._key)
        return self._client

    def get_session(self) -> Any:
        """Return the current session, or None when signed out."""
        auth = self._get_client().auth
        try:
            return auth.get_session()
        except Exception as e:
            raise AuthError(f"Failed to get session: {e}") from e

    def get_access_token(self) -> Optional[str]:
        """Access token of the current session, or None."""
        session = self.get_session()
        return getattr(session, "access_token", None) if session else None

    def get_user(self) -> Any:
        """Return the current user, or None when signed out."""
        auth = self._get_client().auth
        try:
            response = auth.get_user()
        except Exception as e:
            raise AuthError(f"Failed to get current user: {e}") from e
        return getattr(response, "user", None) if response else None

    def sign_in_with_magic_link(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a one-time sign-in link to email."""
        if not email:
            raise ValueError("email is required")
        credentials: dict[str, Any] = {"email": email}
        if redirect_to:
            credentials["options"] = {"email_redirect_to": redirect_to}

        auth = self._get_client().auth
        try:
            auth.sign_in_with_otp(credentials)
        except Exception as e:
            raise AuthError(f"Magic link sign in failed: {e}") from e
        logger.info("Magic link sent to %s", email)

    def sign_out(self) -> None:
        auth = self._get_client().auth
        try:
            auth.sign_out()
        except Exception as e:
            raise AuthError(f"Sign out failed: {e}") from e

    def refresh_session(self) -> Any:
        """Refresh the current session. Returns the new session or None."""
        auth = self._get_client().auth
        try:
            response = auth.refresh_session()
        except Exception as e:
            raise AuthError(f"Failed to refresh session: {e}") from e
        return getattr(response, "session", None) if response else None

    def is_authenticated(self) -> bool:
        """True when a session exists. Never raises: any failure counts as signed out."""
        try:
            return self.get_session() is not None
        except Exception as e:
            logger.warning("Auth check failed, treating as unauthenticated: %s", e)
            return False
