"""Error taxonomy for product lookups and profile state."""


class KnowYourBiteError(Exception):
    """Base class for application errors."""


class ConfigurationError(KnowYourBiteError):
    """Raised when a required credential is not configured."""


class InvalidQueryError(KnowYourBiteError):
    """Raised when a search or scan request carries no usable input."""


class ProductNotFoundError(KnowYourBiteError):
    """Raised when the model reports that the subject is not a food item."""


class UpstreamError(KnowYourBiteError):
    """Raised when an external call fails or returns unusable data."""


class PersistenceError(KnowYourBiteError):
    """Raised when a profile write-back fails."""


class AuthenticationError(KnowYourBiteError):
    """Raised when credentials are rejected."""


class DuplicateAccountError(AuthenticationError):
    """Raised when signing up with an email that is already registered."""
