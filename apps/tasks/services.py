"""
Task lifecycle service.

Mediates between an authenticated caller and the task Persistence
Gateway:
  - validates payloads before any write (``validators``)
  - enforces ownership (owner or admin) on update / delete / status change
  - computes the derived due-soon and overdue views against the clock

Lookups that find nothing return ``None`` instead of raising.
Validation and authorization failures raise ``apps.common.errors``
subclasses; database errors propagate untouched.
"""

import logging
from datetime import datetime, time, timedelta

from django.utils import timezone

from apps.common.errors import Forbidden, InvalidInput

from .models import Task
from .repositories import TaskRepository
from .validators import (
    UPDATABLE_FIELDS,
    ensure_not_past,
    parse_due_date,
    validate_create,
    validate_status,
    validate_update,
)

logger = logging.getLogger(__name__)

DEFAULT_DUE_SOON_DAYS = 3


def due_at(due_date):
    """Midnight at the start of ``due_date`` in the current time zone."""
    return timezone.make_aware(datetime.combine(due_date, time.min))


class TaskService:
    def __init__(self, tasks=None, clock=None):
        self.tasks = tasks if tasks is not None else TaskRepository()
        self._clock = clock or timezone.now

    def now(self):
        return self._clock()

    def today(self):
        return timezone.localdate(self.now())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_by_id(self, task_id):
        return self.tasks.find_by_id(task_id)

    def list_for_user(self, owner_id, filters=None):
        """
        Return ``owner_id``'s tasks, optionally filtered.

        A non-empty ``search`` term wins over every other filter in the
        same call: the other keys are ignored, not combined.
        """
        filters = dict(filters or {})
        search = filters.pop("search", None)
        if search:
            return self.tasks.search(owner_id, search)
        return self.tasks.find_by_user_id(owner_id, filters)

    def get_by_status(self, owner_id, status):
        validate_status(status)
        return self.tasks.find_by_user_id(owner_id, {"status": status})

    def get_by_category(self, category_id, caller):
        tasks = self.tasks.find_by_category_id(category_id)
        return [t for t in tasks if caller.owns(t.owner_id)]

    def get_by_priority(self, priority_id, caller):
        tasks = self.tasks.find_by_priority_id(priority_id)
        return [t for t in tasks if caller.owns(t.owner_id)]

    def get_due_soon(self, owner_id, days=DEFAULT_DUE_SOON_DAYS):
        """
        Tasks due within [now, now + days], inclusive on both ends.

        A due date counts from midnight of that day in the current time
        zone, so a task due today is already past ``now`` and is left out.
        Only ``completed`` tasks are excluded; cancelled ones still show.
        """
        if days is None or days < 0:
            raise InvalidInput("Days must be zero or a positive number.", code="INVALID_DAYS")
        now = self.now()
        cutoff = now + timedelta(days=days)
        return [
            t
            for t in self.tasks.find_by_user_id(owner_id)
            if t.due_date is not None
            and t.status != Task.Status.COMPLETED
            and now <= due_at(t.due_date) <= cutoff
        ]

    def get_overdue(self, owner_id):
        """Tasks whose due midnight is before ``now``, including those due today."""
        now = self.now()
        return [
            t
            for t in self.tasks.find_by_user_id(owner_id)
            if t.due_date is not None
            and t.status != Task.Status.COMPLETED
            and due_at(t.due_date) < now
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, data):
        validate_create(data)
        due_date = parse_due_date(data.get("due_date"))
        ensure_not_past(due_date, self.today())
        if not self.tasks.owner_exists(data["owner_id"]):
            raise InvalidInput("User does not exist.", code="INVALID_OWNER")
        self._check_references(data)

        task = self.tasks.create(
            {
                "owner_id": data["owner_id"],
                "title": str(data["title"]).strip(),
                "description": data.get("description"),
                "category_id": data.get("category_id"),
                "priority_id": data.get("priority_id"),
                "due_date": due_date,
                # Incoming status is ignored: every task starts pending.
                "status": Task.Status.PENDING,
            }
        )
        logger.info("Task %s created for user %s", task.pk, task.owner_id)
        return task

    def update(self, task_id, data, caller):
        changes = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}

        with self.tasks.atomic():
            task = self.tasks.find_by_id(task_id, for_update=True)
            if task is None:
                return None
            self._authorize(task, caller, "update")

            validate_update(changes)
            if "due_date" in changes:
                changes["due_date"] = parse_due_date(changes["due_date"])
                ensure_not_past(changes["due_date"], self.today())
            if "title" in changes:
                changes["title"] = str(changes["title"]).strip()
            self._check_references(changes)

            updated = self.tasks.update(task_id, changes)

        if changes.get("status") == Task.Status.COMPLETED:
            self._on_completed(updated)
        return updated

    def delete(self, task_id, caller):
        with self.tasks.atomic():
            task = self.tasks.find_by_id(task_id, for_update=True)
            if task is None:
                return None
            self._authorize(task, caller, "delete")
            deleted = self.tasks.delete(task_id)

        logger.info("Task %s deleted by %s", task_id, caller.id)
        return deleted

    def change_status(self, task_id, new_status, caller):
        with self.tasks.atomic():
            task = self.tasks.find_by_id(task_id, for_update=True)
            if task is None:
                return None
            self._authorize(task, caller, "change status of")
            validate_status(new_status)
            updated = self.tasks.change_status(task_id, new_status)

        if new_status == Task.Status.COMPLETED:
            self._on_completed(updated)
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _authorize(self, task, caller, action):
        if caller.owns(task.owner_id) or caller.is_admin:
            return
        logger.warning(
            "User %s tried to %s task %s owned by %s",
            caller.id, action, task.pk, task.owner_id,
        )
        raise Forbidden("Not authorized to perform this action on this task.")

    def _check_references(self, data):
        category_id = data.get("category_id")
        if category_id is not None and not self.tasks.category_exists(category_id):
            raise InvalidInput("Category does not exist.", code="INVALID_CATEGORY")
        priority_id = data.get("priority_id")
        if priority_id is not None and not self.tasks.priority_exists(priority_id):
            raise InvalidInput("Priority does not exist.", code="INVALID_PRIORITY")

    def _on_completed(self, task):
        """Hook for completion side effects; only logs for now."""
        if task is not None:
            logger.info("Task %s marked as completed", task.pk)
