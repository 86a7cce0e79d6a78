"""
Tests for core exception handling - custom exception handler and API error classes.
"""

from unittest.mock import patch

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory, TestCase

from core.exceptions import (
    APIError,
    ConflictError,
    DependencyError,
    NotFoundError,
    PermissionError,
    ValidationError,
    custom_exception_handler,
    format_error_details,
    get_error_code,
    get_error_message,
)


class CustomExceptionHandlerTest(TestCase):
    """Tests for custom_exception_handler function"""

    def setUp(self):
        self.factory = RequestFactory()
        self.user = User.objects.create_user(username="testuser", password="test123")

    def create_context(self, path="/api/v1/timesheets/entries/", method="GET"):
        request = self.factory.get(path)
        request.user = self.user
        request.method = method
        return {"request": request}

    def assert_error_body(self, response, code):
        for key in ("error", "code", "message", "details", "error_id", "timestamp"):
            self.assertIn(key, response.data)
        self.assertTrue(response.data["error"])
        self.assertEqual(response.data["code"], code)

    @patch("core.exceptions.logger")
    def test_drf_exception_handling(self, mock_logger):
        response = custom_exception_handler(
            NotFound(detail="Resource not found"), self.create_context()
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assert_error_body(response, "RESOURCE_NOT_FOUND")
        self.assertEqual(response.data["message"], "Resource not found")
        mock_logger.warning.assert_called_once()

    @patch("core.exceptions.logger")
    def test_drf_validation_error_keeps_field_details(self, mock_logger):
        exc = DRFValidationError({"break_minutes": ["Ensure this value is >= 0."]})

        response = custom_exception_handler(exc, self.create_context())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assert_error_body(response, "VALIDATION_ERROR")
        self.assertIn("break_minutes", response.data["details"])

    @patch("core.exceptions.logger")
    def test_business_errors_map_to_status(self, mock_logger):
        cases = [
            (ValidationError("bad interval"), 400, "VALIDATION_ERROR"),
            (ConflictError("already approved"), 409, "CONFLICT"),
            (DependencyError("store down"), 503, "DEPENDENCY_ERROR"),
            (NotFoundError("no entry"), 404, "RESOURCE_NOT_FOUND"),
            (PermissionError("denied"), 403, "PERMISSION_ERROR"),
        ]
        for exc, expected_status, expected_code in cases:
            with self.subTest(code=expected_code):
                response = custom_exception_handler(exc, self.create_context())
                self.assertEqual(response.status_code, expected_status)
                self.assert_error_body(response, expected_code)
                self.assertEqual(response.data["message"], exc.message)

    @patch("core.exceptions.logger")
    def test_dependency_error_logged_as_error(self, mock_logger):
        custom_exception_handler(DependencyError("store down"), self.create_context())

        mock_logger.error.assert_called_once()
        mock_logger.info.assert_not_called()

    @patch("core.exceptions.logger")
    def test_api_error_details_are_passed_through(self, mock_logger):
        exc = ConflictError("locked", details={"entry_id": 7, "status": "APPROVED"})

        response = custom_exception_handler(exc, self.create_context())

        self.assertEqual(response.data["details"], {"entry_id": 7, "status": "APPROVED"})

    @patch("core.exceptions.logger")
    def test_http404_handling(self, mock_logger):
        response = custom_exception_handler(Http404(), self.create_context())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assert_error_body(response, "RESOURCE_NOT_FOUND")

    @patch("core.exceptions.logger")
    def test_django_validation_error_handling(self, mock_logger):
        exc = DjangoValidationError({"clock_out": ["must be after clock_in"]})

        response = custom_exception_handler(exc, self.create_context())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assert_error_body(response, "VALIDATION_ERROR")
        self.assertEqual(response.data["details"], {"clock_out": ["must be after clock_in"]})

    @patch("core.exceptions.logger")
    def test_unhandled_exception_returns_500(self, mock_logger):
        response = custom_exception_handler(RuntimeError("boom"), self.create_context())

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assert_error_body(response, "INTERNAL_SERVER_ERROR")
        # Internal messages never reach the client
        self.assertNotIn("boom", response.data["message"])
        mock_logger.error.assert_called_once()


class APIErrorTest(TestCase):
    def test_defaults(self):
        exc = APIError("generic")

        self.assertEqual(exc.code, "API_ERROR")
        self.assertEqual(exc.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIsNone(exc.details)

    def test_kind_and_as_dict(self):
        exc = ConflictError("already approved", details={"entry_id": 1})

        self.assertEqual(exc.kind, "CONFLICT")
        self.assertEqual(
            exc.as_dict(),
            {"kind": "CONFLICT", "message": "already approved", "details": {"entry_id": 1}},
        )

    def test_overrides(self):
        exc = PermissionError("no", code="AUTHENTICATION_REQUIRED", status_code=401)

        self.assertEqual(exc.code, "AUTHENTICATION_REQUIRED")
        self.assertEqual(exc.status_code, 401)


class ErrorHelpersTest(TestCase):
    def test_get_error_code(self):
        self.assertEqual(get_error_code(NotAuthenticated()), "AUTHENTICATION_REQUIRED")
        self.assertEqual(get_error_code(PermissionDenied()), "PERMISSION_DENIED")
        self.assertEqual(get_error_code(KeyError()), "UNKNOWN_ERROR")

    def test_get_error_message(self):
        self.assertEqual(get_error_message({"detail": "Not found."}), "Not found.")
        self.assertEqual(
            get_error_message({"non_field_errors": ["Bad range"]}), "Bad range"
        )
        self.assertEqual(get_error_message({"date": ["Required."]}), "Required.")
        self.assertEqual(get_error_message(["first", "second"]), "first")

    def test_format_error_details(self):
        self.assertIsNone(format_error_details({"detail": "x"}))
        self.assertEqual(
            format_error_details({"detail": "x", "date": ["Required."]}),
            {"date": ["Required."]},
        )
        self.assertEqual(format_error_details(["a"]), ["a"])
        self.assertIsNone(format_error_details("plain"))
