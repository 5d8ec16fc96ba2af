"""
Password strength and account field rules.

``PasswordStrengthValidator`` plugs into Django's ``AUTH_PASSWORD_VALIDATORS``
so ``validate_password`` (and ``manage.py changepassword``) enforce the same
policy as the account service.  The remaining helpers raise the service's
own ``InvalidInput`` errors with stable codes.
"""

import re

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from apps.common.errors import InvalidInput, WeakPassword

from .models import User

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"


class PasswordStrengthValidator:
    """
    Ordered rules; the first one that fails is the only one reported.

    Each rule raises a ``ValidationError`` whose ``code`` is the stable
    error code returned to API clients.
    """

    def __init__(self, min_length=8):
        self.min_length = min_length

    def validate(self, password, user=None):
        if len(password) < self.min_length:
            raise ValidationError(
                "Password must be at least %(min_length)d characters long.",
                code="PASSWORD_TOO_SHORT",
                params={"min_length": self.min_length},
            )
        if not re.search(r"[A-Z]", password):
            raise ValidationError(
                "Password must contain at least one uppercase letter.",
                code="PASSWORD_NEEDS_UPPERCASE",
            )
        if not re.search(r"[a-z]", password):
            raise ValidationError(
                "Password must contain at least one lowercase letter.",
                code="PASSWORD_NEEDS_LOWERCASE",
            )
        if not re.search(r"[0-9]", password):
            raise ValidationError(
                "Password must contain at least one number.",
                code="PASSWORD_NEEDS_NUMBER",
            )
        if not any(ch in SPECIAL_CHARACTERS for ch in password):
            raise ValidationError(
                "Password must contain at least one special character.",
                code="PASSWORD_NEEDS_SPECIAL",
            )

    def get_help_text(self):
        return (
            f"Your password must be at least {self.min_length} characters and "
            "contain an uppercase letter, a lowercase letter, a number and a "
            "special character."
        )


def validate_password_strength(password, user=None):
    """Run the configured validators and surface the first failure."""
    try:
        validate_password(password or "", user=user)
    except ValidationError as exc:
        first = exc.error_list[0]
        raise WeakPassword(exc.messages[0], code=first.code) from exc


def normalize_email(email):
    return email.strip().lower()


def validate_username(username):
    value = (username or "").strip()
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise InvalidInput(
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters long.",
            code="INVALID_USERNAME",
        )


def validate_email_address(email):
    try:
        validate_email(email)
    except ValidationError as exc:
        raise InvalidInput(
            "Please provide a valid email address.", code="INVALID_EMAIL"
        ) from exc


def validate_role(role):
    if role not in User.Role.values:
        raise InvalidInput(
            'Role must be either "user" or "admin".', code="INVALID_ROLE"
        )
