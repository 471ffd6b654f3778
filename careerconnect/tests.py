from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import User
from accounts.tokens import issue_token


class ApiFallbackTests(TestCase):
    @override_settings(DEBUG=True)
    def test_unknown_api_route_is_json_even_in_debug(self):
        resp = self.client.get("/api/does-not-exist")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp["Content-Type"], "application/json")
        self.assertEqual(resp.json(), {"success": False, "error": "Not Found"})

    def test_unknown_nested_route(self):
        resp = self.client.post("/api/jobs/1/unknown-action")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Not Found")

    def test_invalid_json_body(self):
        user = User.objects.create_user(email="json@example.com", password="secret1")
        resp = self.client.put(
            reverse("profile"),
            "{not json",
            content_type="application/json",
            HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid JSON body")
