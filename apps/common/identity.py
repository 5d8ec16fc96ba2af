"""Caller identity resolved from an authenticated request."""

from dataclasses import dataclass

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def same_id(a, b):
    """Compare two identifiers regardless of UUID / string representation."""
    if a is None or b is None:
        return False
    return str(a) == str(b)


@dataclass(frozen=True)
class Caller:
    """
    The ``{id, role}`` pair the authentication layer hands to the services.

    Services never look up the caller themselves; whoever verified the
    bearer token builds this object (usually via ``from_claims``).
    """

    id: object
    role: str = ROLE_USER

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def owns(self, owner_id):
        return same_id(self.id, owner_id)

    @classmethod
    def from_claims(cls, claims):
        return cls(id=claims["id"], role=claims.get("role") or ROLE_USER)
