"""
User account service: registration, login, profile management,
password change, password reset and access-token refresh.

Collaborators are injected:
  - ``users``  : the user Persistence Gateway (``UserRepository``)
  - ``tokens`` : the Token Issuer (``TokenIssuer``)

Users leave this module only in their public form (no password hash).
Errors are ``apps.common.errors`` subclasses; database failures
propagate unchanged.
"""

import hashlib
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.utils import timezone

from apps.common.errors import (
    EmailExists,
    Forbidden,
    InvalidCredentials,
    InvalidCurrentPassword,
    InvalidResetToken,
    MissingFields,
    NotFound,
    PasswordSame,
    UsernameExists,
)
from apps.common.identity import same_id

from .models import User
from .repositories import UserRepository
from .serializers import public_user
from .tokens import TokenIssuer
from .validators import (
    normalize_email,
    validate_email_address,
    validate_password_strength,
    validate_role,
    validate_username,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "email", "role", "first_name", "last_name")
RESET_TOKEN_BYTES = 32


def hash_reset_token(raw_token):
    return hashlib.sha256(raw_token.encode()).hexdigest()


class UserService:
    def __init__(self, users=None, tokens=None):
        self.users = users if users is not None else UserRepository()
        self.tokens = tokens if tokens is not None else TokenIssuer()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def register(self, data):
        """
        Create an account and log it in straight away.

        Uniqueness is checked email first, then username, before the
        password policy runs.  A supplied ``role`` is ignored: new
        accounts are always plain users.
        """
        email = data.get("email")
        username = data.get("username")
        password = data.get("password")
        if not email or not username or not password:
            raise MissingFields()

        email = normalize_email(email)
        username = username.strip()
        validate_username(username)
        validate_email_address(email)

        if self.users.email_exists(email):
            raise EmailExists()
        if self.users.username_exists(username):
            raise UsernameExists()

        validate_password_strength(password)

        user = self.users.create(
            {
                "email": email,
                "username": username,
                "password": password,
                "role": User.Role.USER,
            }
        )
        logger.info("Registered user %s", user.pk)
        return self._session(user)

    def login(self, email, password):
        """Unknown email and wrong password fail identically."""
        user = self.users.find_by_email(email or "")
        if user is None:
            # Pay the hashing cost anyway so response time does not reveal
            # whether the email is registered.
            make_password(password)
            logger.warning("Failed login attempt")
            raise InvalidCredentials()
        if not user.check_password(password):
            logger.warning("Failed login attempt for user %s", user.pk)
            raise InvalidCredentials()

        logger.info("User %s logged in", user.pk)
        return self._session(user)

    def refresh_access_token(self, refresh_token):
        """
        Exchange a refresh token for a new access token.

        Claims are re-read from storage, so a role change applies on the
        next refresh and a deleted account can no longer refresh.
        """
        claims = self.tokens.verify(refresh_token, is_refresh=True)
        if claims is None:
            return None
        user = self.users.find_by_id(claims["id"])
        if user is None:
            return None
        return self.tokens.issue_access(user.claims)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------
    def get_by_id(self, user_id):
        return self.users.find_by_id_safe(user_id)

    def list_all(self, filters=None):
        """Every user, newest first.  Admin-only at the boundary."""
        return [public_user(u) for u in self.users.find_all(filters)]

    def update(self, user_id, data, caller_id, is_admin=False):
        changes = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}

        with self.users.atomic():
            existing = self.users.find_by_id(user_id, for_update=True)
            if existing is None:
                return None
            self._authorize(user_id, caller_id, is_admin, "update")

            if not is_admin:
                # Silently drop role changes from non-admins.
                changes.pop("role", None)
            if "role" in changes:
                validate_role(changes["role"])

            if "email" in changes:
                changes["email"] = normalize_email(changes["email"] or "")
                validate_email_address(changes["email"])
                if changes["email"] != existing.email and self.users.email_exists(
                    changes["email"], exclude_id=existing.pk
                ):
                    raise EmailExists()

            if "username" in changes:
                changes["username"] = (changes["username"] or "").strip()
                validate_username(changes["username"])
                if changes["username"] != existing.username and self.users.username_exists(
                    changes["username"], exclude_id=existing.pk
                ):
                    raise UsernameExists()

            if not changes:
                return public_user(existing)
            updated = self.users.update(user_id, changes)

        return public_user(updated)

    def delete(self, user_id, caller_id, is_admin=False):
        with self.users.atomic():
            existing = self.users.find_by_id(user_id, for_update=True)
            if existing is None:
                return False
            self._authorize(user_id, caller_id, is_admin, "delete")
            deleted = self.users.delete(user_id)

        logger.info("User %s deleted by %s", user_id, caller_id)
        return deleted

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------
    def change_password(self, user_id, current_password, new_password):
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found.", code="USER_NOT_FOUND")
        if not user.check_password(current_password):
            raise InvalidCurrentPassword()
        if current_password == new_password:
            raise PasswordSame()
        validate_password_strength(new_password, user=user)
        return self.users.change_password(user_id, new_password)

    def initiate_password_reset(self, email):
        """
        Start a reset for ``email``.

        Always reports success.  For a known account the raw token is
        included so the caller can deliver it out-of-band; only its hash
        is stored, valid for ``PASSWORD_RESET_TIMEOUT`` seconds.
        """
        result = {"success": True}
        user = self.users.find_by_email(email or "")
        if user is None:
            return result

        raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
        expires_at = timezone.now() + timedelta(seconds=settings.PASSWORD_RESET_TIMEOUT)
        self.users.store_reset_token(user.pk, hash_reset_token(raw_token), expires_at)
        logger.info("Password reset initiated for user %s", user.pk)

        result["reset_token"] = raw_token
        return result

    def reset_password(self, reset_token, new_password):
        validate_password_strength(new_password)
        if not reset_token:
            raise InvalidResetToken()

        with self.users.atomic():
            user = self.users.consume_reset_token(hash_reset_token(reset_token))
            if user is None:
                raise InvalidResetToken()
            self.users.change_password(user.pk, new_password)

        logger.info("Password reset completed for user %s", user.pk)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _session(self, user):
        pair = self.tokens.issue_pair(user.claims)
        return {
            "user": public_user(user),
            "access_token": pair.access_token,
            "refresh_token": pair.refresh_token,
        }

    def _authorize(self, user_id, caller_id, is_admin, action):
        if same_id(user_id, caller_id) or is_admin:
            return
        logger.warning("User %s tried to %s account %s", caller_id, action, user_id)
        raise Forbidden(f"You are not authorized to {action} this account.")
