"""
Admin key authentication middleware.

This middleware guards the admin API with the shared ADMIN_API_KEY.
Client endpoints (activate, validate, deactivate) are unauthenticated:
the signed license key is their credential.
"""

import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX = "/api/v1/admin/"


class AdminKeyAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware for admin API authentication.

    This middleware:
    1. Reads the admin key from X-Admin-Key (or a Bearer token)
    2. Compares it in constant time with settings.ADMIN_API_KEY
    3. Returns 401 Unauthorized if authentication fails
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate authentication.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not request.path.startswith(ADMIN_API_PREFIX):
            return None
        return self._authenticate_admin_api(request)

    def _authenticate_admin_api(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Authenticate admin API request.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if auth fails, None if successful
        """
        expected = getattr(settings, "ADMIN_API_KEY", "")
        if not expected:
            logger.error("ADMIN_API_KEY is not configured")
            return JsonResponse(
                {"error": "ADMIN_API_KEY not configured on server"},
                status=500,
            )

        admin_key = request.headers.get("X-Admin-Key") or request.headers.get(
            "Authorization", ""
        ).replace("Bearer ", "")

        if not admin_key:
            return JsonResponse(
                {"error": "Missing admin key. Provide X-Admin-Key header."},
                status=401,
            )

        if not hmac.compare_digest(admin_key.encode(), expected.encode()):
            logger.warning(
                "Invalid admin key attempted from %s", request.META.get("REMOTE_ADDR")
            )
            return JsonResponse({"error": "Unauthorized: invalid admin key"}, status=401)

        request.is_admin = True  # type: ignore
        return None
