"""Tests for Task, lookup and assignment models."""

import uuid
from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from apps.tasks.models import Category, Priority, Task, TaskAssignment
from conftest import CategoryFactory, PriorityFactory, TaskFactory, UserFactory


@pytest.mark.django_db
class TestLookupModels:
    """Category / Priority: unique names, __str__."""

    def test_category_str(self):
        assert str(Category.objects.create(name="Health")) == "Health"

    def test_category_name_unique(self):
        Category.objects.create(name="Dup")
        with pytest.raises(IntegrityError):
            Category.objects.create(name="Dup")

    def test_priority_name_unique(self):
        Priority.objects.create(name="high")
        with pytest.raises(IntegrityError):
            Priority.objects.create(name="high")


@pytest.mark.django_db
class TestTaskModel:
    """Task model: defaults, ordering, cascades, __str__."""

    def test_create_task(self, user):
        t = Task.objects.create(title="Do stuff", owner=user)
        assert isinstance(t.pk, uuid.UUID)
        assert t.owner_id == user.pk

    def test_default_status_pending(self, user):
        t = Task.objects.create(title="New", owner=user)
        assert t.status == Task.Status.PENDING

    def test_status_values(self):
        assert Task.Status.values == ["pending", "in_progress", "completed", "cancelled"]

    def test_str(self, user):
        assert str(Task.objects.create(title="My Task", owner=user)) == "My Task"

    def test_ordering_due_date_nulls_last_then_newest(self, user):
        today = timezone.localdate()
        no_due_old = TaskFactory(owner=user, title="no due old")
        no_due_new = TaskFactory(owner=user, title="no due new")
        later = TaskFactory(owner=user, due_date=today + timedelta(days=5))
        sooner = TaskFactory(owner=user, due_date=today + timedelta(days=1))
        ordered = list(Task.objects.filter(owner=user))
        assert ordered == [sooner, later, no_due_new, no_due_old]

    def test_category_set_null_on_delete(self, user):
        cat = CategoryFactory()
        t = TaskFactory(owner=user, category=cat)
        cat.delete()
        t.refresh_from_db()
        assert t.category is None

    def test_priority_set_null_on_delete(self, user):
        prio = PriorityFactory()
        t = TaskFactory(owner=user, priority=prio)
        prio.delete()
        t.refresh_from_db()
        assert t.priority is None

    def test_cascade_on_user_delete(self, user):
        TaskFactory(owner=user)
        uid = user.pk
        user.delete()
        assert Task.objects.filter(owner_id=uid).count() == 0


@pytest.mark.django_db
class TestTaskAssignment:

    def test_removed_with_task(self, task, other_user):
        TaskAssignment.objects.create(task=task, user=other_user)
        task.delete()
        assert TaskAssignment.objects.count() == 0

    def test_removed_with_assignee(self, task):
        assignee = UserFactory()
        TaskAssignment.objects.create(task=task, user=assignee)
        assignee.delete()
        assert TaskAssignment.objects.count() == 0
