"""Authentication provider interface."""

from typing import Protocol

from know_your_bite.domain.profiles import UserIdentity


class AuthProvider(Protocol):
    """Interface for sign-up and sign-in against a credential store."""

    def sign_up(self, name: str, email: str, password: str) -> UserIdentity:
        """Register credentials and return the new identity."""

    def sign_in(self, email: str, password: str) -> UserIdentity:
        """Check credentials and return the matching identity."""

    def sign_out(self) -> None:
        """End the provider session, if the provider keeps one."""
