"""Supabase Auth-backed authentication provider."""

import logging
from dataclasses import dataclass

from supabase import Client

from know_your_bite.domain.errors import AuthenticationError
from know_your_bite.domain.profiles import UserIdentity
from know_your_bite.services.auth import AuthProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthProvider(AuthProvider):
    """Delegates credential checks to the hosted auth provider."""

    client: Client

    def sign_up(self, name: str, email: str, password: str) -> UserIdentity:
        """Register a user with Supabase Auth."""
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"name": name}},
                }
            )
        except Exception as exc:
            _logger.warning("Supabase sign-up failed: %s", exc)
            raise AuthenticationError(str(exc) or "Sign-up failed") from exc
        return _identity(response.user, fallback_name=name)

    def sign_in(self, email: str, password: str) -> UserIdentity:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            _logger.warning("Supabase sign-in failed: %s", exc)
            raise AuthenticationError("Invalid email or password") from exc
        return _identity(response.user, fallback_name=email.split("@")[0])

    def sign_out(self) -> None:
        """End the Supabase Auth session."""
        self.client.auth.sign_out()


def _identity(user: object, fallback_name: str) -> UserIdentity:
    if user is None:
        raise AuthenticationError("Authentication provider returned no user")
    metadata = getattr(user, "user_metadata", None) or {}
    return UserIdentity(
        id=str(user.id),
        name=str(metadata.get("name") or fallback_name),
        email=str(user.email or ""),
    )
