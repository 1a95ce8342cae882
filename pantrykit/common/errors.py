"""
Error taxonomy for the inventory core

- ValidationError: missing/invalid local fields, never reaches the network
- AuthenticationRequiredError: no auth token in the local store
- NetworkError: transport failure (connection refused, timeout, bad JSON)
- RemoteError: the GraphQL endpoint returned an explicit error payload
- ClassificationUnavailableError: AI categorization step unreachable
  (always absorbed inside the classifier)

Public repository/resolver methods do not raise these across their boundary;
they are carried inside ``Failure`` results and turned into
``OperationResult`` objects.
"""
from typing import Optional


AUTHORIZATION_CODES = {"UNAUTHENTICATED", "FORBIDDEN", "UNAUTHORIZED"}


class PantryError(Exception):
    """Base class for inventory core errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(PantryError):
    """A required local field is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class AuthenticationRequiredError(PantryError):
    """No auth token is stored; the caller must treat the user as logged out."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NetworkError(PantryError):
    """Transport-level failure talking to the remote endpoint."""


class RemoteError(PantryError):
    """The remote endpoint answered with an explicit error payload."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)

    @property
    def is_authorization(self) -> bool:
        """True when the server rejected the token or the caller's rights"""
        return bool(self.code) and self.code.upper() in AUTHORIZATION_CODES


class ClassificationUnavailableError(PantryError):
    """The AI categorization step is unavailable or misconfigured."""
