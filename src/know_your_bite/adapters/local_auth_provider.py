"""Credential store kept in the local key-value store."""

import base64
import hashlib
import hmac
import os
import uuid
from dataclasses import dataclass

from know_your_bite.domain.errors import AuthenticationError, DuplicateAccountError
from know_your_bite.domain.profiles import UserIdentity
from know_your_bite.services.auth import AuthProvider
from know_your_bite.services.store import CREDENTIALS_KEY, KeyValueStore

_PBKDF2_ALG = "sha256"
_PBKDF2_ITERATIONS = 200_000


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash string."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac(
        _PBKDF2_ALG, password.encode("utf-8"), salt, _PBKDF2_ITERATIONS
    )
    salt_b64 = base64.urlsafe_b64encode(salt).decode("ascii")
    dk_b64 = base64.urlsafe_b64encode(dk).decode("ascii")
    return f"pbkdf2_{_PBKDF2_ALG}${_PBKDF2_ITERATIONS}${salt_b64}${dk_b64}"


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when the password matches the stored hash."""
    try:
        scheme, iterations, salt_b64, dk_b64 = password_hash.split("$", 3)
        alg = scheme.removeprefix("pbkdf2_")
        salt = base64.urlsafe_b64decode(salt_b64)
        expected = base64.urlsafe_b64decode(dk_b64)
        actual = hashlib.pbkdf2_hmac(
            alg, password.encode("utf-8"), salt, int(iterations)
        )
    except ValueError:
        return False
    return hmac.compare_digest(actual, expected)


@dataclass
class LocalAuthProvider(AuthProvider):
    """Checks credentials synchronously against locally stored hashes."""

    store: KeyValueStore

    def sign_up(self, name: str, email: str, password: str) -> UserIdentity:
        """Register a new account keyed by normalized email."""
        credentials = self._credentials()
        key = _normalize_email(email)
        if key in credentials:
            raise DuplicateAccountError("Email already exists")
        identity = UserIdentity(id=str(uuid.uuid4()), name=name, email=key)
        credentials[key] = {
            "id": identity.id,
            "name": name,
            "password_hash": hash_password(password),
        }
        self.store.set(CREDENTIALS_KEY, credentials)
        return identity

    def sign_in(self, email: str, password: str) -> UserIdentity:
        """Return the identity for matching credentials."""
        key = _normalize_email(email)
        entry = self._credentials().get(key)
        if not isinstance(entry, dict) or not verify_password(
            password, str(entry.get("password_hash", ""))
        ):
            raise AuthenticationError("Invalid email or password")
        return UserIdentity(id=str(entry["id"]), name=str(entry["name"]), email=key)

    def sign_out(self) -> None:
        """Local credentials keep no provider session."""

    def _credentials(self) -> dict[str, object]:
        stored = self.store.get(CREDENTIALS_KEY)
        return dict(stored) if isinstance(stored, dict) else {}


def _normalize_email(email: str) -> str:
    return email.strip().lower()
