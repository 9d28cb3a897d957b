import pytest

from client.errors import (
    ClientError,
    ServerError,
    UnauthorizedError,
    ValidationError,
    classify,
    error_message,
    field_errors,
)


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (400, "client-error"),
        (401, "unauthorized"),
        (403, "client-error"),
        (404, "client-error"),
        (409, "client-error"),
        (422, "validation"),
        (500, "server-error"),
        (502, "server-error"),
    ],
)
def test_status_to_kind(status, kind):
    assert classify(status).kind == kind


def test_message_prefers_server_message():
    body = {"success": False, "message": "Course not found", "error": "NotFound"}
    assert error_message(body, 404) == "Course not found"


def test_message_falls_back_to_error_then_detail():
    assert error_message({"error": "Bad Request"}, 400) == "Bad Request"
    assert error_message({"detail": "Not authenticated"}, 401) == "Not authenticated"


def test_message_defaults_per_status():
    assert error_message(None, 401) == "Please log in again"
    assert error_message({}, 418) == "HTTP 418"
    assert error_message("", 504) == "Server error"


def test_plain_text_body_is_used_as_message():
    assert error_message("Service Unavailable", 503) == "Service Unavailable"


def test_envelope_details_become_field_errors():
    error = classify(
        422,
        {"message": "Validation error", "code": "VALIDATION_ERROR", "details": {"password": ["too short"]}},
    )

    assert isinstance(error, ValidationError)
    assert error.code == "VALIDATION_ERROR"
    assert error.details == {"password": ["too short"]}


def test_nested_errors_mapping_is_unwrapped():
    body = {
        "success": False,
        "message": "Validation failed",
        "details": {"errors": {"email": ["Email is required"], "password": "Too short"}},
    }

    assert field_errors(body) == {"email": ["Email is required"], "password": ["Too short"]}
    assert classify(422, body).details == {"email": ["Email is required"], "password": ["Too short"]}


def test_fastapi_detail_list_becomes_field_errors():
    body = {
        "detail": [
            {"loc": ["body", "email"], "msg": "Field required", "type": "missing"},
            {"loc": ["body", "email"], "msg": "too short", "type": "string_too_short"},
            {"loc": ["query", "page"], "msg": "must be >= 1", "type": "greater_than_equal"},
        ]
    }

    assert field_errors(body) == {
        "email": ["Field required", "too short"],
        "query.page": ["must be >= 1"],
    }
    assert classify(422, body).message == "Validation error"


def test_error_classes_share_the_normalized_shape():
    for error in (classify(400), classify(401), classify(500)):
        assert isinstance(error, (ClientError, UnauthorizedError, ServerError))
        assert error.message
        assert error.status is not None
