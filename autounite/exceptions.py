"""
Custom exception classes for the AutoUnite rental marketplace.

These exceptions provide precise error types that controllers let bubble up
to the app-level error handler, which renders a friendly JSON message with
the matching HTTP status instead of a generic 500 error.
"""


class DomainError(Exception):
    """Base class for every client-facing failure raised by the services."""

    status_code = 400
    kind = "domain_error"

    def __init__(self, message: str = "Error: request could not be processed") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


# ---------- kinds ----------
class NotFoundError(DomainError):
    """Raised when a referenced resource does not exist."""

    status_code = 404
    kind = "not_found"

    def __init__(self, message: str = "Error: resource not found") -> None:
        super().__init__(message)


class InvalidStateError(DomainError):
    """Raised when a command is not legal in the resource's current state."""

    status_code = 400
    kind = "invalid_state"

    def __init__(self, message: str = "Error: operation not allowed in the current state") -> None:
        super().__init__(message)


class InvalidArgumentError(DomainError):
    """Raised for malformed or out-of-range input values."""

    status_code = 400
    kind = "invalid_argument"

    def __init__(self, message: str = "Error: invalid argument") -> None:
        super().__init__(message)


class ConflictError(DomainError):
    """Raised when creating a resource that must be unique and already exists."""

    status_code = 409
    kind = "conflict"

    def __init__(self, message: str = "Error: resource already exists") -> None:
        super().__init__(message)


class UnauthorizedError(DomainError):
    status_code = 401
    kind = "unauthorized"

    def __init__(self, message: str = "Error: authentication required") -> None:
        super().__init__(message)


class ForbiddenError(DomainError):
    """Raised when the caller is not a party allowed to act on the resource."""

    status_code = 403
    kind = "forbidden"

    def __init__(self, message: str = "Error: you are not allowed to do this") -> None:
        super().__init__(message)


# ---------- specific errors ----------
class VehicleNotFoundError(NotFoundError):
    """Raised when a vehicle ID cannot be found in the system."""

    def __init__(self, message: str = "Error: vehicle not found") -> None:
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    """Raised when a user ID cannot be found in the system."""

    def __init__(self, message: str = "Error: user not found") -> None:
        super().__init__(message)


class RentalNotFoundError(NotFoundError):
    """Raised when a rental record cannot be found in the system."""

    def __init__(self, message: str = "Error: rental not found") -> None:
        super().__init__(message)


class ReviewNotFoundError(NotFoundError):
    def __init__(self, message: str = "Error: review not found") -> None:
        super().__init__(message)


class ReportNotFoundError(NotFoundError):
    def __init__(self, message: str = "Error: report not found") -> None:
        super().__init__(message)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, message: str = "Error: notification not found") -> None:
        super().__init__(message)


class InvalidDateRangeError(InvalidArgumentError):
    """Raised when start date is not before end date or an invalid date is provided."""

    def __init__(self, message: str = "Error: invalid date range") -> None:
        super().__init__(message)


class VehicleUnavailableError(InvalidStateError):
    """Raised when a vehicle is not available for the requested dates."""

    def __init__(self, message: str = "Error: vehicle is not available") -> None:
        super().__init__(message)
