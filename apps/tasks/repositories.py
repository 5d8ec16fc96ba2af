"""
Django ORM implementation of the task Persistence Gateway.

The repository owns every query the task service needs and nothing
else: no validation and no authorization.  ``TaskService`` receives an
instance through its constructor, so tests can hand it any object that
offers the same methods.
"""

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q

from apps.common.errors import InvalidInput

from .filters import TaskFilter
from .models import Category, Priority, Task


class TaskRepository:
    """Task reads and writes, ordered by due date (nulls last) then newest."""

    model = Task

    def atomic(self):
        """Transaction wrapping a check-then-write sequence."""
        return transaction.atomic()

    def _base_queryset(self):
        return Task.objects.select_related("category", "priority")

    # ----- single-row access -----

    def find_by_id(self, task_id, for_update=False):
        """Return the task or ``None``; malformed ids count as absent."""
        qs = self._base_queryset()
        if for_update:
            # Nullable outer joins cannot be locked on PostgreSQL, so no select_related.
            qs = Task.objects.select_for_update()
        try:
            return qs.get(pk=task_id)
        except (Task.DoesNotExist, ValueError, ValidationError):
            return None

    def create(self, data):
        return Task.objects.create(
            owner_id=data["owner_id"],
            title=data["title"],
            description=data.get("description"),
            category_id=data.get("category_id"),
            priority_id=data.get("priority_id"),
            due_date=data.get("due_date"),
            status=data.get("status", Task.Status.PENDING),
        )

    def update(self, task_id, data):
        """Apply a partial update and return the refreshed task (or ``None``)."""
        task = self.find_by_id(task_id)
        if task is None:
            return None
        for field, value in data.items():
            setattr(task, field, value)
        task.save(update_fields=[*data.keys(), "updated_at"])
        return self.find_by_id(task_id)

    def delete(self, task_id):
        deleted, _ = Task.objects.filter(pk=task_id).delete()
        return deleted > 0

    def change_status(self, task_id, status):
        return self.update(task_id, {"status": status})

    # ----- collections -----
    # A malformed owner/category/priority id matches nothing.

    def find_all(self, filters=None):
        return list(self._filter(self._base_queryset(), filters))

    def find_by_user_id(self, user_id, filters=None):
        qs = self._scoped(owner_id=user_id)
        if qs is None:
            return []
        return list(self._filter(qs, filters))

    def find_by_category_id(self, category_id):
        qs = self._scoped(category_id=category_id)
        return [] if qs is None else list(qs)

    def find_by_priority_id(self, priority_id):
        qs = self._scoped(priority_id=priority_id)
        return [] if qs is None else list(qs)

    def search(self, user_id, term):
        """Case-insensitive substring match on title or description."""
        qs = self._scoped(owner_id=user_id)
        if qs is None:
            return []
        return list(qs.filter(Q(title__icontains=term) | Q(description__icontains=term)))

    # ----- reference data -----

    def owner_exists(self, user_id):
        return self._exists(get_user_model(), user_id)

    def category_exists(self, category_id):
        return self._exists(Category, category_id)

    def priority_exists(self, priority_id):
        return self._exists(Priority, priority_id)

    # ----- helpers -----

    def _scoped(self, **lookup):
        try:
            return self._base_queryset().filter(**lookup)
        except (ValueError, ValidationError):
            return None

    @staticmethod
    def _exists(model, pk):
        try:
            return model.objects.filter(pk=pk).exists()
        except (ValueError, ValidationError):
            return False

    @staticmethod
    def _filter(queryset, filters):
        if not filters:
            return queryset
        filterset = TaskFilter(data=filters, queryset=queryset)
        if not filterset.is_valid():
            fields = ", ".join(sorted(filterset.errors))
            raise InvalidInput(f"Invalid filter value for: {fields}.", code="INVALID_FILTER")
        return filterset.qs
