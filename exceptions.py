"""Exception hierarchy for the Estato portal."""

from typing import Optional


class EstatoError(Exception):
    """Base exception for all portal errors."""


class ConfigurationError(EstatoError):
    """Raised when required configuration is missing."""


class BackendError(EstatoError):
    """Raised when the hosted data backend rejects or fails a request."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class AuthenticationError(BackendError):
    """Raised when signing in or out against the backend fails."""


class ValidationError(EstatoError):
    """Raised when submitted form data is incomplete or malformed."""


class NotFoundError(EstatoError):
    """Raised when a project or property cannot be found."""
