"""
Unit tests for request middleware.
"""

import uuid

import pytest
from django.http import HttpResponse, JsonResponse
from django.test import RequestFactory

from core.middleware.auth import AdminKeyAuthenticationMiddleware
from core.middleware.metrics import UUID_SEGMENT
from core.middleware.observability import ObservabilityMiddleware, api_area


@pytest.fixture
def factory():
    return RequestFactory()


def ok(_request):
    return HttpResponse("ok")


class TestApiArea:
    """Tests for api_area."""

    def test_areas(self):
        assert api_area("/api/v1/admin/keys") == "admin"
        assert api_area("/api/v1/license/activate") == "client"
        assert api_area("/health/") is None


class TestMetricsEndpointLabel:
    """Tests for endpoint label normalization."""

    def test_key_ids_collapse(self):
        path = f"/api/v1/admin/keys/{uuid.uuid4()}/revoke"
        assert UUID_SEGMENT.sub("/{id}", path) == "/api/v1/admin/keys/{id}/revoke"


class TestObservabilityMiddleware:
    """Tests for ObservabilityMiddleware."""

    def test_keeps_incoming_correlation_id(self, factory):
        request = factory.get("/health/", HTTP_X_CORRELATION_ID="abc-123")

        response = ObservabilityMiddleware(ok)(request)

        assert response["X-Correlation-ID"] == "abc-123"
        assert response["X-Request-Status"] == "success"

    def test_classifies_client_errors(self, factory):
        request = factory.get("/api/v1/admin/keys")

        response = ObservabilityMiddleware(lambda _r: JsonResponse({}, status=401))(request)

        assert response["X-Request-Status"] == "client_error"


class TestAdminKeyAuthenticationMiddleware:
    """Tests for AdminKeyAuthenticationMiddleware."""

    @pytest.fixture(autouse=True)
    def admin_key(self, settings):
        settings.ADMIN_API_KEY = "s3cret"

    def test_ignores_client_paths(self, factory):
        middleware = AdminKeyAuthenticationMiddleware(ok)
        assert middleware.process_request(factory.post("/api/v1/license/activate")) is None

    def test_accepts_header(self, factory):
        request = factory.get("/api/v1/admin/keys", HTTP_X_ADMIN_KEY="s3cret")

        assert AdminKeyAuthenticationMiddleware(ok).process_request(request) is None
        assert request.is_admin is True

    def test_rejects_wrong_key(self, factory):
        request = factory.get("/api/v1/admin/keys", HTTP_AUTHORIZATION="Bearer nope")

        response = AdminKeyAuthenticationMiddleware(ok).process_request(request)

        assert response.status_code == 401
