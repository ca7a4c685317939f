# =============================================================================
# tests/test_health.py - Health and Mail Check Endpoint Tests
# =============================================================================

from app.constants.constants import FailureReason
from app.core.exceptions import MailDeliveryError


class TestHealth:
    """Test GET /api/health."""

    def test_reports_running(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "🚀 VYZ Portfolio API is running smoothly"
        assert body["version"] == "1.0.0"
        assert body["environment"] == "test"
        assert body["timestamp"].endswith("Z")
        assert body["services"] == {
            "email": "Ready",
            "database": "Not required",
            "rateLimiting": "Active",
        }

    def test_system_details(self, client):
        system = client.get("/api/health").json()["system"]

        assert set(system) == {"pythonVersion", "platform", "pid", "uptime"}
        assert system["uptime"] >= 0

    def test_does_not_touch_mail_relay(self, client, fake_dispatcher):
        client.get("/api/health")

        fake_dispatcher.verify.assert_not_called()
        fake_dispatcher.send_contact_pair.assert_not_called()


class TestEmailCheck:
    """Test GET /api/test-email."""

    def test_success_masks_account(self, client, fake_dispatcher):
        response = client.get("/api/test-email")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "✅ Email configuration is correct and ready to send emails!"
        assert body["service"] == "smtp.zoho.com"
        assert body["user"] == "*" * 15 + "live"
        assert "portfolio@vyzx.live" not in response.text
        fake_dispatcher.verify.assert_awaited_once()

    def test_failure_hides_detail_outside_development(self, client, fake_dispatcher):
        fake_dispatcher.verify.side_effect = MailDeliveryError(
            FailureReason.authentication, "535 Authentication failed", 535
        )

        response = client.get("/api/test-email")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "❌ Email configuration error",
            "error": "Check server logs",
            "code": "authentication",
        }

    def test_failure_shows_detail_in_development(self, make_client, fake_dispatcher):
        client = make_client(ENVIRONMENT="development")
        fake_dispatcher.verify.side_effect = MailDeliveryError(FailureReason.connection, "Connection refused")

        body = client.get("/api/test-email").json()

        assert body["error"] == "Connection refused"
        assert body["code"] == "connection"
