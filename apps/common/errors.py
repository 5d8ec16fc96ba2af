"""
Typed service errors shared by the accounts and tasks apps.

Every error the services raise belongs to one of a closed set of kinds.
Each carries a stable machine-readable ``code`` plus a human-readable
``message``.  The kind is the only thing the boundary layer needs to pick
a response status (see ``apps.common.exceptions``).

Persistence failures are never wrapped in these classes; they propagate
unchanged.
"""

import enum


class ErrorKind(str, enum.Enum):
    BAD_INPUT = "bad_input"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base class for every error raised by a service method."""

    kind = ErrorKind.INTERNAL
    default_code = "SERVER_ERROR"
    default_message = "Internal server error."

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)

    def __repr__(self):
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ---------------------------------------------------------------------------
# Bad input
# ---------------------------------------------------------------------------
class InvalidInput(ServiceError):
    kind = ErrorKind.BAD_INPUT
    default_code = "INVALID_INPUT"
    default_message = "Invalid input."


class MissingFields(InvalidInput):
    default_code = "MISSING_REQUIRED_FIELDS"
    default_message = "Email, username and password are required."


class InvalidDueDate(InvalidInput):
    default_code = "INVALID_DUE_DATE"
    default_message = "Due date cannot be in the past."


class InvalidStatus(InvalidInput):
    default_code = "INVALID_STATUS"
    default_message = "Invalid task status."


class WeakPassword(InvalidInput):
    """Raised with the code of the first password rule that failed."""

    default_code = "PASSWORD_TOO_WEAK"
    default_message = "Password does not meet the strength requirements."


class PasswordSame(InvalidInput):
    default_code = "PASSWORD_SAME"
    default_message = "New password must be different from current password."


class InvalidCurrentPassword(InvalidInput):
    default_code = "INVALID_CURRENT_PASSWORD"
    default_message = "Current password is incorrect."


class InvalidResetToken(InvalidInput):
    default_code = "INVALID_RESET_TOKEN"
    default_message = "Reset token is invalid, expired or already used."


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------
class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    default_code = "CONFLICT"
    default_message = "Resource already exists."


class EmailExists(Conflict):
    default_code = "EMAIL_EXISTS"
    default_message = "Email is already in use."


class UsernameExists(Conflict):
    default_code = "USERNAME_EXISTS"
    default_message = "Username is already in use."


# ---------------------------------------------------------------------------
# Authentication / authorization
# ---------------------------------------------------------------------------
class Unauthorized(ServiceError):
    kind = ErrorKind.UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_message = "Authentication required."


class InvalidCredentials(Unauthorized):
    default_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials."


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN
    default_code = "FORBIDDEN"
    default_message = "You are not authorized to perform this action."


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"
    default_message = "Resource not found."
