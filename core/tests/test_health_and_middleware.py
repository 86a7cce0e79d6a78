from unittest.mock import patch

from rest_framework.test import APITestCase


class HealthCheckTest(APITestCase):
    def test_public_health_check(self):
        response = self.client.get("/api/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "online")

    def test_detailed_health_check(self):
        response = self.client.get("/health/")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["services"]["database"]["status"], "healthy")
        self.assertEqual(body["services"]["cache"]["status"], "healthy")

    def test_cache_outage_reported(self):
        with patch("workledger.health.cache") as cache:
            cache.set.side_effect = ConnectionError("down")
            response = self.client.get("/health/")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["services"]["cache"]["status"], "unhealthy")

    def test_api_root_lists_endpoints(self):
        response = self.client.get("/api/v1/")

        self.assertIn("v1_timesheets", response.data["endpoints"])
        self.assertIn("v1_payroll_summary", response.data["endpoints"])


class APIMiddlewareTest(APITestCase):
    def test_processing_time_header(self):
        response = self.client.get("/api/health/")

        self.assertIn("X-Processing-Time-Ms", response)

    def test_client_errors_logged_without_credentials(self):
        with self.assertLogs("core.middleware", level="WARNING") as logs:
            self.client.get(
                "/api/v1/timesheets/entries/",
                HTTP_AUTHORIZATION="Token not-a-real-token",
            )

        self.assertTrue(any("API Client Error" in line for line in logs.output))
        self.assertFalse(any("not-a-real-token" in line for line in logs.output))
