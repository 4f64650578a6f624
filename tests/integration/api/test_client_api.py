"""
Integration tests for client license endpoints.
"""

import pytest

from activations.infrastructure.models import Activation
from core.domain.value_objects import LicenseTier
from licenses.infrastructure.models import LicenseKey

ACTIVATE_URL = "/api/v1/license/activate"
VALIDATE_URL = "/api/v1/license/validate"
DEACTIVATE_URL = "/api/v1/license/deactivate"

MACHINE_A = "machine-aaaaaaaa-0001"
MACHINE_B = "machine-bbbbbbbb-0002"


@pytest.mark.django_db
@pytest.mark.integration
class TestClientAPI:
    """Integration tests for the client API."""

    def test_activate_success(self, api_client, db_license_key):
        """Test a key is bound on first activation."""
        response = api_client.post(
            ACTIVATE_URL,
            {
                "key": db_license_key.key,
                "machine_id": MACHINE_A,
                "machine_name": "Studio PC",
                "app_version": "2.1.0",
            },
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["tier"] == "pro"
        assert data["daysRemaining"] == 30
        assert data["expiresAt"] is not None
        assert data["machineId"] == MACHINE_A
        assert data["bound"] is True
        assert "message" in data
        assert LicenseKey.objects.get(id=db_license_key.id).status == "used"

    def test_activate_is_idempotent(self, api_client, db_license_key):
        """Test the same machine can activate repeatedly."""
        payload = {"key": db_license_key.key, "machine_id": MACHINE_A}
        api_client.post(ACTIVATE_URL, payload, format="json")

        response = api_client.post(ACTIVATE_URL, payload, format="json")

        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert "message" not in response.json()
        assert Activation.objects.filter(license_key_id=db_license_key.id).count() == 1

    def test_activate_other_machine(self, api_client, db_license_key):
        """Test a bound key is refused on another machine."""
        api_client.post(
            ACTIVATE_URL, {"key": db_license_key.key, "machine_id": MACHINE_A}, format="json"
        )

        response = api_client.post(
            ACTIVATE_URL, {"key": db_license_key.key, "machine_id": MACHINE_B}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["code"] == "ALREADY_BOUND_TO_OTHER_MACHINE"
        assert data["bound_to"] == "machine-..."
        assert data["contact_admin"] is True

    def test_activate_imports_signed_key(self, api_client, codec):
        """Test an unseen but correctly signed key is imported."""
        key = codec.generate(LicenseTier.ENTERPRISE, 7)

        response = api_client.post(
            ACTIVATE_URL, {"key": key.lower(), "machine_id": MACHINE_A}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["tier"] == "enterprise"
        assert LicenseKey.objects.filter(key=key).exists()

    def test_activate_forged_key(self, api_client):
        """Test a forged key is refused without being stored."""
        response = api_client.post(
            ACTIVATE_URL, {"key": "ABCD-EFGH-P1AX-0000", "machine_id": MACHINE_A}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "reason": "Invalid license key",
            "code": "INVALID_KEY_SIGNATURE",
        }
        assert LicenseKey.objects.count() == 0

    def test_activate_malformed_key(self, api_client):
        """Test a malformed key is a bad request."""
        response = api_client.post(
            ACTIVATE_URL, {"key": "not-a-key", "machine_id": MACHINE_A}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_KEY_FORMAT"

    def test_activate_missing_fields(self, api_client):
        """Test missing key or machine id."""
        response = api_client.post(ACTIVATE_URL, {"key": "ABCD-EFGH-P1AX-0000"}, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_activate_records_forwarded_ip(self, api_client, db_license_key):
        """Test the first X-Forwarded-For hop is stored."""
        api_client.post(
            ACTIVATE_URL,
            {"key": db_license_key.key, "machine_id": MACHINE_A},
            format="json",
            HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1",
        )

        assert Activation.objects.get(license_key_id=db_license_key.id).ip_address == "203.0.113.9"

    def test_validate(self, api_client, db_license_key):
        """Test validate after activation."""
        payload = {"key": db_license_key.key, "machine_id": MACHINE_A}
        api_client.post(ACTIVATE_URL, payload, format="json")

        response = api_client.post(VALIDATE_URL, payload, format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["daysRemaining"] == 30
        assert "message" not in data

    def test_validate_not_activated(self, api_client, db_license_key):
        """Test validate from a machine without a binding."""
        response = api_client.post(
            VALIDATE_URL, {"key": db_license_key.key, "machine_id": MACHINE_A}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["code"] == "NOT_ACTIVATED"

    def test_validate_revoked(self, api_client, db_license_key):
        """Test validate of a revoked key."""
        payload = {"key": db_license_key.key, "machine_id": MACHINE_A}
        api_client.post(ACTIVATE_URL, payload, format="json")
        LicenseKey.objects.filter(id=db_license_key.id).update(status="revoked")

        response = api_client.post(VALIDATE_URL, payload, format="json")

        assert response.json()["code"] == "LICENSE_REVOKED"

    def test_deactivate_is_refused(self, api_client, db_license_key):
        """Test end users cannot deactivate."""
        response = api_client.post(
            DEACTIVATE_URL, {"key": db_license_key.key, "machine_id": MACHINE_A}, format="json"
        )

        assert response.status_code == 403
        data = response.json()
        assert data["valid"] is False
        assert data["code"] == "DEACTIVATION_NOT_ALLOWED"
        assert data["contact_admin"] is True

    def test_deactivate_without_body(self, api_client):
        """Test the refusal does not depend on the payload."""
        response = api_client.post(DEACTIVATE_URL, {}, format="json")
        assert response.status_code == 403
