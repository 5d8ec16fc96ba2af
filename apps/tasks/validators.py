"""
Stateless rules checked before a task is persisted.

Used by both the create and the update path of ``TaskService``.  No I/O,
no side effects: each function either returns normally or raises an
``InvalidInput`` subclass carrying a stable error code.
"""

from datetime import date, datetime

from django.utils.dateparse import parse_date, parse_datetime

from apps.common.errors import InvalidDueDate, InvalidInput, InvalidStatus

from .models import TITLE_MAX_LENGTH, Task

UPDATABLE_FIELDS = (
    "title",
    "description",
    "category_id",
    "priority_id",
    "due_date",
    "status",
)


def parse_due_date(value):
    """
    Coerce ``value`` to a ``date``.

    Accepts dates, datetimes (date component kept) and ISO-8601 strings.
    Returns ``None`` for ``None`` / empty string; raises ``InvalidDueDate``
    for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value) or parse_datetime(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, datetime):
            return parsed.date()
        if parsed is not None:
            return parsed
    raise InvalidDueDate("Invalid due date format.")


def ensure_not_past(due_date, today):
    """Floor-of-day check: a due date earlier than ``today`` is rejected."""
    if due_date is not None and due_date < today:
        raise InvalidDueDate("Due date cannot be in the past.")


def _validate_title(title):
    if title is None or not str(title).strip():
        raise InvalidInput("Task title is required.", code="INVALID_TITLE")
    if len(str(title).strip()) > TITLE_MAX_LENGTH:
        raise InvalidInput(
            f"Task title must be {TITLE_MAX_LENGTH} characters or less.",
            code="INVALID_TITLE_LENGTH",
        )


def validate_status(status):
    if status not in Task.Status.values:
        raise InvalidStatus(
            f"Status must be one of: {', '.join(Task.Status.values)}."
        )


def validate_create(data):
    if not data.get("owner_id"):
        raise InvalidInput("User ID is required.", code="USER_ID_REQUIRED")
    _validate_title(data.get("title"))
    if data.get("due_date") is not None:
        parse_due_date(data["due_date"])


def validate_update(data):
    if not data:
        raise InvalidInput("No data provided for update.", code="NO_UPDATE_DATA")
    if "title" in data:
        _validate_title(data["title"])
    if data.get("due_date") is not None:
        parse_due_date(data["due_date"])
    if "status" in data:
        validate_status(data["status"])
