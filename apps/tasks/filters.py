"""
django-filter FilterSet used by the task repository.

Supports filtering by:
  - status (exact match or comma-separated list)
  - category_id / priority_id (UUID)
  - due_date (exact day)

Free-text search is not part of the FilterSet: ``TaskService`` routes
``search`` to ``TaskRepository.search`` on its own.
"""

from django_filters import rest_framework as filters

from .models import Task


class TaskFilter(filters.FilterSet):
    """
    Filterable fields accepted in the ``filters`` mapping of
    ``TaskService.list_for_user``.

    Examples:
        {"status": "pending,in_progress"}
        {"category_id": "<uuid>"}
        {"due_date": "2026-12-31"}
    """

    status = filters.CharFilter(method="filter_csv_field")
    category_id = filters.UUIDFilter(field_name="category_id")
    priority_id = filters.UUIDFilter(field_name="priority_id")
    due_date = filters.DateFilter(field_name="due_date")

    class Meta:
        model = Task
        fields = ["status", "category_id", "priority_id", "due_date"]

    def filter_csv_field(self, queryset, name, value):
        """Allow comma-separated values, e.g. status=pending,in_progress."""
        values = [v.strip() for v in value.split(",") if v.strip()]
        if values:
            return queryset.filter(**{f"{name}__in": values})
        return queryset
