"""
auth/errors.py -- Exception taxonomy for the credential workflows.

Every error a workflow raises on purpose derives from AuthServiceError. The
HTTP layer maps each subclass to a status code in one exception handler; the
`code` attribute is the machine-readable value used in the error envelope.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthServiceError(Exception):
    """Base class for expected, caller-visible workflow failures."""

    code = "auth_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCredentialsError(AuthServiceError):
    """Unknown login identifier OR wrong password.

    The two causes share one class and one message so a caller cannot tell
    which one happened.
    """

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid credentials.")


class ConflictError(AuthServiceError):
    """Username or email already taken."""

    code = "conflict"


class PolicyViolationError(AuthServiceError):
    """A caller-supplied password does not satisfy the password policy."""

    code = "policy_violation"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PolicyExhaustedError(AuthServiceError):
    """The generator could not produce a policy-compliant password.

    Signals a self-contradictory or pathological policy configuration.
    """

    code = "policy_exhausted"


class NotFoundError(AuthServiceError):
    code = "not_found"


class NotificationError(AuthServiceError):
    """The identity was created but the password email could not be sent.

    The insert is not rolled back. user_id identifies the created record so
    the caller can follow up manually.
    """

    code = "notification_failed"

    def __init__(self, user_id: str, message: str = "User created but the password email could not be sent.") -> None:
        super().__init__(message)
        self.user_id = user_id


class PasswordConfigError(ValueError):
    """The password policy configuration cannot be satisfied by construction."""


class EmailDeliveryError(Exception):
    """An email transport failed to hand the message off."""
