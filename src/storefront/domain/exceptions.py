"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI
layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.domain.model.checkout import StockShortfall


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class CheckoutValidationFailure(ValidationError):
    """Every problem found while validating a checkout, reported together.

    ``violations`` holds one message per problem; ``shortfalls`` keeps the
    stock problems among them as records.
    """

    def __init__(self, violations: list[str], shortfalls: list[StockShortfall] | None = None) -> None:
        self.violations = list(violations)
        self.shortfalls = list(shortfalls or [])
        super().__init__("; ".join(self.violations))


# --- Authentication -----------------------------------------------------------


class AuthenticationError(DomainException):
    """Base class for session and credential failures."""


class InvalidCredentials(AuthenticationError):
    """Every role probe rejected the credential."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class TransientProbeFailure(AuthenticationError):
    """A role probe failed for a reason other than authorization."""

    def __init__(self, role: str, detail: str) -> None:
        self.role = role
        self.detail = detail
        super().__init__(f"Login failed while checking {role}: {detail}. Please try again.")


class NotAuthenticated(AuthenticationError):
    """The operation needs a logged-in session."""

    def __init__(self, message: str = "Not logged in") -> None:
        super().__init__(message)


class AccessDenied(AuthenticationError):
    """The session's role is not allowed to perform the operation."""


# --- Remote calls -------------------------------------------------------------


class RemoteCallError(DomainException):
    """Base class for failures talking to the storefront backend."""


class SessionExpired(RemoteCallError):
    """The backend answered 401; the local session has been purged."""

    def __init__(self, message: str = "Session expired, please log in again") -> None:
        super().__init__(message)


class BackendUnavailable(RemoteCallError):
    """Timeout or transport failure before a response was received."""


class BackendError(RemoteCallError):
    """The backend answered with a non-auth error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}")
