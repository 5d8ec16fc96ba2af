"""
Django ORM implementation of the user Persistence Gateway.

Password hashing happens here (``set_password``), never in the service.
Unique constraints on email and username are the authoritative guard;
an ``IntegrityError`` raised at insert/update time is reported with the
same typed conflict the service's fast-path check would have raised.
"""

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.common.errors import EmailExists, InvalidInput, UsernameExists

from .filters import UserFilter
from .models import PasswordResetToken, User
from .serializers import public_user


class UserRepository:
    model = User

    def atomic(self):
        return transaction.atomic()

    # ----- lookups -----

    def find_by_id(self, user_id, for_update=False):
        """Full model instance (including the password hash) or ``None``."""
        qs = User.objects.select_for_update() if for_update else User.objects.all()
        try:
            return qs.get(pk=user_id)
        except (User.DoesNotExist, ValueError, ValidationError):
            return None

    def find_by_id_safe(self, user_id):
        return public_user(self.find_by_id(user_id))

    def find_by_email(self, email):
        return User.objects.filter(email__iexact=email.strip()).first()

    def email_exists(self, email, exclude_id=None):
        qs = User.objects.filter(email__iexact=email.strip())
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def username_exists(self, username, exclude_id=None):
        qs = User.objects.filter(username__iexact=username.strip())
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def find_all(self, filters=None):
        qs = User.objects.all()
        if filters:
            filterset = UserFilter(data=filters, queryset=qs)
            if not filterset.is_valid():
                fields = ", ".join(sorted(filterset.errors))
                raise InvalidInput(f"Invalid filter value for: {fields}.", code="INVALID_FILTER")
            qs = filterset.qs
        return list(qs)

    # ----- writes -----

    def create(self, data):
        try:
            with transaction.atomic():
                return User.objects.create_user(
                    username=data["username"],
                    email=data["email"],
                    password=data["password"],
                    role=data.get("role", User.Role.USER),
                )
        except IntegrityError as exc:
            self._raise_conflict(data, exc)

    def update(self, user_id, data):
        user = self.find_by_id(user_id)
        if user is None:
            return None
        for field, value in data.items():
            setattr(user, field, value)
        try:
            with transaction.atomic():
                user.save(update_fields=[*data.keys(), "updated_at"])
        except IntegrityError as exc:
            self._raise_conflict(data, exc, exclude_id=user_id)
        return user

    def delete(self, user_id):
        deleted, _ = User.objects.filter(pk=user_id).delete()
        return deleted > 0

    def change_password(self, user_id, new_password):
        user = self.find_by_id(user_id)
        if user is None:
            return False
        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        return True

    # ----- password reset tokens -----

    def store_reset_token(self, user_id, token_hash, expires_at):
        """Replace any earlier tokens for ``user_id``; one row per user at most."""
        with transaction.atomic():
            PasswordResetToken.objects.filter(user_id=user_id).delete()
            return PasswordResetToken.objects.create(
                user_id=user_id, token_hash=token_hash, expires_at=expires_at,
            )

    def consume_reset_token(self, token_hash):
        """
        Mark a usable token as used and return its user, else ``None``.

        Must run inside ``atomic()`` so the row lock holds until commit.
        """
        token = (
            PasswordResetToken.objects.select_for_update()
            .filter(token_hash=token_hash)
            .first()
        )
        if token is None or not token.is_usable:
            return None
        now = timezone.now()
        token.used_at = now
        token.save(update_fields=["used_at"])
        # One successful reset invalidates every other outstanding link.
        PasswordResetToken.objects.filter(
            user_id=token.user_id, used_at__isnull=True,
        ).update(used_at=now)
        return self.find_by_id(token.user_id)

    # ----- helpers -----

    def _raise_conflict(self, data, exc, exclude_id=None):
        email = data.get("email")
        if email and self.email_exists(email, exclude_id=exclude_id):
            raise EmailExists() from exc
        username = data.get("username")
        if username and self.username_exists(username, exclude_id=exclude_id):
            raise UsernameExists() from exc
        raise exc
