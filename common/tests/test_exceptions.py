from common.exceptions import envelope_exception_handler
from django.http import Http404
from django.test import override_settings
from rest_framework.exceptions import NotAuthenticated, ValidationError


def test_validation_error_keeps_field_errors():
    resp = envelope_exception_handler(ValidationError({"email": ["This field is required."]}), {})
    assert resp.status_code == 400
    assert resp.data["success"] is False
    assert resp.data["message"] == "Validation error"
    assert resp.data["errors"]["email"] == ["This field is required."]


def test_http_errors_are_wrapped_with_detail_message():
    resp = envelope_exception_handler(Http404("Not found."), {})
    assert resp.status_code == 404
    assert resp.data == {"success": False, "message": "Not found."}

    resp = envelope_exception_handler(NotAuthenticated(), {})
    assert resp.status_code == 401
    assert resp.data["success"] is False


def test_unexpected_errors_become_generic_500():
    resp = envelope_exception_handler(RuntimeError("db exploded"), {})
    assert resp.status_code == 500
    assert resp.data == {"success": False, "message": "Server error"}


@override_settings(DEBUG=True)
def test_unexpected_error_detail_only_in_debug():
    resp = envelope_exception_handler(RuntimeError("db exploded"), {})
    assert resp.data["error"] == "db exploded"
