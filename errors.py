class FinFlowError(Exception):
    """Base class for application errors."""


class ValidationError(FinFlowError):
    """Raised when submitted data fails validation; the message is user-facing."""


class BackendError(FinFlowError):
    """Raised when the database call behind a service fails."""

    def __init__(self, message, original=None):
        super().__init__(message)
        self.original = original


class AuthError(FinFlowError):
    """Raised on failed sign-in, bad tokens and similar account problems."""


class UnverifiedEmailError(AuthError):
    """Raised when an account signs in before confirming its e-mail address."""
