from django.http import Http404
from django.test import SimpleTestCase
from rest_framework import exceptions

from apps.core.api_exceptions import VisitorRequired
from apps.core.exceptions import custom_exception_handler


class CustomExceptionHandlerTests(SimpleTestCase):
    def handle(self, exc):
        return custom_exception_handler(exc, {"view": None})

    def test_validation_errors_keep_field_detail(self):
        resp = self.handle(exceptions.ValidationError({"type": ["\"dislike\" is not a valid choice."]}))

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "The given data was invalid.")
        self.assertIn("type", resp.data["error"])

    def test_detail_becomes_the_message(self):
        resp = self.handle(VisitorRequired())

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], VisitorRequired.default_detail)
        self.assertEqual(resp.data["error"]["detail"].code, "visitor_required")

    def test_django_404_is_normalized(self):
        resp = self.handle(Http404())

        self.assertEqual(resp.status_code, 404)
        self.assertIn("message", resp.data)
        self.assertIn("detail", resp.data["error"])

    def test_throttle_header_survives(self):
        resp = self.handle(exceptions.Throttled(wait=7))

        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp["Retry-After"], "7")

    def test_unhandled_error_is_logged_and_not_echoed(self):
        with self.assertLogs("apps.core.exceptions", level="ERROR"):
            resp = self.handle(RuntimeError("password=hunter2"))

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data, {"message": "An unexpected error occurred.", "error": "server_error"})
