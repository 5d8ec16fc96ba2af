"""django-filter FilterSet for the admin user listing."""

from django_filters import rest_framework as filters

from .models import User


class UserFilter(filters.FilterSet):
    """
    Partial, case-insensitive match on username and email; exact role.

    Examples:
        {"username": "ali"}
        {"email": "@example.com", "role": "admin"}
    """

    username = filters.CharFilter(lookup_expr="icontains")
    email = filters.CharFilter(lookup_expr="icontains")
    role = filters.ChoiceFilter(choices=User.Role.choices)

    class Meta:
        model = User
        fields = ["username", "email", "role"]
