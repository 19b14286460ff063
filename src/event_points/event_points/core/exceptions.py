class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced user, event or enrollment does not exist."""

    status_code = 404


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class PolicyDeniedError(AuthorizationError):
    """Raised when the admin policy switches forbid an action."""


class NotificationError(Exception):
    """Raised by a dispatcher when a push message could not be delivered."""


class InvalidPushTokenError(NotificationError):
    """The device token is permanently invalid and should be forgotten."""

    def __init__(self, token: str, message: str = "Device token is invalid or no longer registered"):
        super().__init__(message)
        self.token = token
