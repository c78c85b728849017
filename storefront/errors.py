"""
Error taxonomy shared by the stores, the backend clients and the routes.

Nothing here is fatal to the process: callers recover by keeping the
previous state and surfacing ``message`` to the shopper.
"""


class StorefrontError(Exception):
    """Base class for storefront errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkFailure(StorefrontError):
    """Transport or HTTP-level failure talking to a backend."""
    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class AuthRejected(StorefrontError):
    """Invalid credentials, or an expired/rejected customer token."""


class MalformedPayload(StorefrontError):
    """A located recommendation payload failed to decode."""


class ModelResponseError(StorefrontError):
    """The language model answered without any usable choice."""


class PreconditionViolation(StorefrontError):
    """Caller bug, e.g. adding a product that has no variants."""
