"""
Application error types.

Services raise these; the API layer maps each one to an HTTP response in
``golftrip.api.main``.
"""

from typing import Any, Dict, List, Optional


class GolfTripError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class AuthenticationRequired(GolfTripError):
    """No session cookie, or the session is unknown or expired."""

    status_code = 303


class Forbidden(GolfTripError):
    """Authenticated, but not allowed to perform the operation."""

    status_code = 403


class InvalidCredentials(GolfTripError):
    """Email/password pair did not match."""

    status_code = 401


class NotFound(GolfTripError):
    """Referenced entity does not exist."""

    status_code = 404


class FormError(GolfTripError):
    """
    Error tied to a submitted form.

    ``field_errors`` maps a field name to its messages; ``values`` carries the
    submitted input back so the client can re-populate the form.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[Dict[str, List[str]]] = None,
        values: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.field_errors = field_errors or {}
        self.values = values or {}


class ValidationError(FormError):
    """Malformed input."""

    status_code = 422


class NoGolfersAssigned(ValidationError):
    """A foursome was submitted with every golfer slot empty."""


class ConflictError(FormError):
    """Uniqueness violation."""

    status_code = 409


class DuplicateGolferInFoursome(ConflictError):
    """The same golfer occupies more than one slot of a foursome."""


class DuplicateEmail(ConflictError):
    """An account with this email already exists."""


class DuplicateChampionYear(ConflictError):
    """A champion is already recorded for this year."""


class UpstreamCollaboratorError(GolfTripError):
    """Image store or email provider failure."""

    status_code = 502
