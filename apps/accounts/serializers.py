"""
Outbound representation of a user.

The password hash never leaves the accounts app: every user handed back
by ``UserService`` goes through ``PublicUserSerializer``.
"""

from rest_framework import serializers

from .models import User


class PublicUserSerializer(serializers.ModelSerializer):
    """User without credentials (read-only)."""

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "role",
            "first_name",
            "last_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


def public_user(user):
    """Serialize ``user`` or pass ``None`` through."""
    if user is None:
        return None
    return dict(PublicUserSerializer(user).data)
