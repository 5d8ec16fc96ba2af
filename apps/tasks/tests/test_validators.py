"""Tests for the stateless task entity rules."""

import uuid
from datetime import date, datetime, timedelta

import pytest

from apps.common.errors import InvalidDueDate, InvalidInput, InvalidStatus
from apps.tasks.validators import (
    ensure_not_past,
    parse_due_date,
    validate_create,
    validate_update,
)

OWNER = uuid.uuid4()


def _code(excinfo):
    return excinfo.value.code


class TestValidateCreate:

    def test_valid(self):
        validate_create({"owner_id": OWNER, "title": "Write report", "due_date": "2030-01-31"})

    def test_owner_required(self):
        with pytest.raises(InvalidInput) as exc:
            validate_create({"title": "No owner"})
        assert _code(exc) == "USER_ID_REQUIRED"

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_blank_title(self, title):
        with pytest.raises(InvalidInput) as exc:
            validate_create({"owner_id": OWNER, "title": title})
        assert _code(exc) == "INVALID_TITLE"

    def test_title_too_long(self):
        with pytest.raises(InvalidInput) as exc:
            validate_create({"owner_id": OWNER, "title": "x" * 101})
        assert _code(exc) == "INVALID_TITLE_LENGTH"

    def test_title_of_exactly_100_chars_ok(self):
        validate_create({"owner_id": OWNER, "title": "x" * 100})

    def test_title_length_measured_after_trimming(self):
        validate_create({"owner_id": OWNER, "title": "  " + "x" * 100 + "  "})

    def test_unparseable_due_date(self):
        with pytest.raises(InvalidDueDate) as exc:
            validate_create({"owner_id": OWNER, "title": "T", "due_date": "next tuesday"})
        assert _code(exc) == "INVALID_DUE_DATE"


class TestValidateUpdate:

    def test_empty_payload(self):
        with pytest.raises(InvalidInput) as exc:
            validate_update({})
        assert _code(exc) == "NO_UPDATE_DATA"

    def test_blank_title(self):
        with pytest.raises(InvalidInput) as exc:
            validate_update({"title": " "})
        assert _code(exc) == "INVALID_TITLE"

    def test_title_too_long(self):
        with pytest.raises(InvalidInput) as exc:
            validate_update({"title": "y" * 150})
        assert _code(exc) == "INVALID_TITLE_LENGTH"

    def test_invalid_status(self):
        with pytest.raises(InvalidStatus) as exc:
            validate_update({"status": "archived"})
        assert _code(exc) == "INVALID_STATUS"

    @pytest.mark.parametrize("status", ["pending", "in_progress", "completed", "cancelled"])
    def test_every_status_accepted(self, status):
        validate_update({"status": status})

    def test_clearing_due_date_allowed(self):
        validate_update({"due_date": None})

    def test_unparseable_due_date(self):
        with pytest.raises(InvalidDueDate):
            validate_update({"due_date": "2024-02-30"})


class TestParseDueDate:

    def test_iso_date_string(self):
        assert parse_due_date("2030-06-15") == date(2030, 6, 15)

    def test_iso_datetime_string_keeps_date(self):
        assert parse_due_date("2030-06-15T23:30:00+02:00") == date(2030, 6, 15)

    def test_datetime_instance(self):
        assert parse_due_date(datetime(2030, 6, 15, 8, 0)) == date(2030, 6, 15)

    def test_none_and_empty(self):
        assert parse_due_date(None) is None
        assert parse_due_date("") is None

    def test_non_string_rejected(self):
        with pytest.raises(InvalidDueDate):
            parse_due_date(12345)


class TestEnsureNotPast:

    def test_yesterday_rejected(self):
        today = date(2030, 1, 10)
        with pytest.raises(InvalidDueDate):
            ensure_not_past(today - timedelta(days=1), today)

    def test_today_accepted(self):
        today = date(2030, 1, 10)
        ensure_not_past(today, today)

    def test_none_accepted(self):
        ensure_not_past(None, date(2030, 1, 10))
