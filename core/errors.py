"""
core/errors.py -- Exception taxonomy shared by the stores, auth and API layers.

Every error carries the HTTP status it maps to and the client-facing message.
api/main.py renders all of them through one exception handler as
{"message": ...}, so route and store code raise, and never build responses.

Layer rule: core/ is the kernel. No imports from api/, auth/, or records/.
"""


class CvRegistryError(Exception):
    """Base exception for all CV registry errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(CvRegistryError):
    """Required request fields are missing or the body cannot be parsed."""

    status_code = 400


class AuthenticationError(CvRegistryError):
    """Missing, invalid or expired token, bad credentials, or an unknown user."""

    status_code = 401


class NotFoundError(CvRegistryError):
    """A requested record does not exist."""

    status_code = 404


class NotAllowedError(CvRegistryError):
    """The route exists but does not accept the HTTP verb."""

    status_code = 405


class StoreError(CvRegistryError):
    """Reaching or querying the relational store failed.

    message is the operation-level summary ("Failed to fetch CV records");
    detail is the underlying driver error text.
    """

    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail
