"""
Root conftest: shared pytest fixtures and factory-boy factories.

Database access is granted per test class via ``@pytest.mark.django_db``.
"""

import pytest

import factory
from django.contrib.auth import get_user_model

from apps.accounts.services import UserService
from apps.accounts.tokens import TokenIssuer
from apps.common.identity import Caller
from apps.tasks.models import Category, Priority, Task
from apps.tasks.services import TaskService

User = get_user_model()

PASSWORD = "TestPass123!"


# ===================================================================
# Factories
# ===================================================================

class UserFactory(factory.django.DjangoModelFactory):
    """Create a User with a hashed password and unique username/email."""

    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"testuser{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    role = User.Role.USER
    password = factory.PostGeneration(
        lambda obj, create, extracted, **kw: obj.set_password(extracted or PASSWORD)
        or obj.save()
    )


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Category {n}")


class PriorityFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Priority
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Priority {n}")


class TaskFactory(factory.django.DjangoModelFactory):
    """Create a Task owned by a given user."""

    class Meta:
        model = Task

    title = factory.Sequence(lambda n: f"Task {n}")
    description = "A test task"
    status = Task.Status.PENDING
    owner = factory.SubFactory(UserFactory)


# ===================================================================
# Fixtures
# ===================================================================

@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    """PBKDF2 is deliberately slow; tests only need a working hasher."""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def user(db):
    """A persisted User instance (password: TestPass123!)."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second user for cross-user isolation tests."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    return UserFactory(role=User.Role.ADMIN)


@pytest.fixture
def caller(user):
    return Caller(id=user.pk, role=user.role)


@pytest.fixture
def other_caller(other_user):
    return Caller(id=other_user.pk, role=other_user.role)


@pytest.fixture
def admin_caller(admin_user):
    return Caller(id=admin_user.pk, role=admin_user.role)


@pytest.fixture
def category(db):
    return CategoryFactory(name="Work")


@pytest.fixture
def priority(db):
    return PriorityFactory(name="High")


@pytest.fixture
def task(user):
    """A Task owned by ``user``."""
    return TaskFactory(owner=user)


@pytest.fixture
def token_issuer():
    return TokenIssuer()


@pytest.fixture
def task_service():
    return TaskService()


@pytest.fixture
def user_service(token_issuer):
    return UserService(tokens=token_issuer)
