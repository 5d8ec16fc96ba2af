"""Tests for the service error taxonomy and its DRF boundary handler."""

import uuid

import pytest
from rest_framework.exceptions import NotAuthenticated

from apps.common.errors import (
    EmailExists,
    ErrorKind,
    Forbidden,
    InvalidCredentials,
    InvalidInput,
    NotFound,
    ServiceError,
    WeakPassword,
)
from apps.common.exceptions import STATUS_BY_KIND, service_exception_handler
from apps.common.identity import Caller, same_id


class TestErrors:

    def test_defaults(self):
        err = EmailExists()
        assert err.kind is ErrorKind.CONFLICT
        assert err.code == "EMAIL_EXISTS"
        assert str(err) == err.message

    def test_override_code_and_message(self):
        err = WeakPassword("Too short.", code="PASSWORD_TOO_SHORT")
        assert err.kind is ErrorKind.BAD_INPUT
        assert (err.code, err.message) == ("PASSWORD_TOO_SHORT", "Too short.")

    def test_every_kind_has_a_status(self):
        assert set(STATUS_BY_KIND) == set(ErrorKind)


class TestHandler:

    @pytest.mark.parametrize(
        "exc, status_code",
        [
            (InvalidInput(code="INVALID_TITLE"), 400),
            (InvalidCredentials(), 401),
            (Forbidden(), 403),
            (NotFound(), 404),
            (EmailExists(), 409),
            (ServiceError(), 500),
        ],
    )
    def test_status_by_kind(self, exc, status_code):
        response = service_exception_handler(exc, {})
        assert response.status_code == status_code
        assert response.data == {
            "success": False,
            "error": {"code": exc.code, "message": exc.message},
        }

    def test_internal_error_logged(self, caplog):
        with caplog.at_level("ERROR", logger="apps.common.exceptions"):
            service_exception_handler(ServiceError(), {})
        assert "SERVER_ERROR" in caplog.text

    def test_drf_exception_falls_through(self):
        response = service_exception_handler(NotAuthenticated(), {})
        assert response.status_code == 401

    def test_unknown_exception_left_to_django(self):
        assert service_exception_handler(RuntimeError("boom"), {}) is None


class TestCaller:

    def test_owns_across_representations(self):
        caller = Caller(id="6f1c0a5e-3d0b-4a41-9a57-1f0b6a8c2d11")
        assert caller.owns(uuid.UUID("6f1c0a5e-3d0b-4a41-9a57-1f0b6a8c2d11"))
        assert not caller.owns(None)

    def test_from_claims(self):
        caller = Caller.from_claims({"id": "abc", "role": "admin"})
        assert caller.is_admin
        assert not Caller.from_claims({"id": "abc"}).is_admin

    def test_same_id(self):
        assert not same_id(None, None)
        assert same_id(1, "1")
