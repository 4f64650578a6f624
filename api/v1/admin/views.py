"""
Admin API views.

These endpoints are used by the admin panel to:
- List and generate keys
- Revoke, re-activate, reset, unbind, delete, upgrade or downgrade a key
- Browse the audit log and dashboard counters

Requests are authenticated by AdminKeyAuthenticationMiddleware.
"""

import uuid

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import APIError
from api.v1 import dependencies
from api.v1.admin.serializers import (
    AuditLogListResponseSerializer,
    AuditLogQuerySerializer,
    GenerateKeysRequestSerializer,
    GenerateKeysResponseSerializer,
    LicenseKeyListResponseSerializer,
    LicenseStatsSerializer,
    ManageKeyRequestSerializer,
    ManageKeyResponseSerializer,
)
from audit.application.handlers.list_audit_log_handler import ListAuditLogHandler
from audit.application.queries.list_audit_log import ListAuditLogQuery
from audit.domain.entries import AuditAction
from core.domain.value_objects import LicenseTier
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.generate_keys import GenerateKeysCommand
from licenses.application.commands.manage_key import KeyAction, ManageKeyCommand
from licenses.application.handlers.admin_override_handlers import ManageKeyHandler
from licenses.application.handlers.generate_keys_handler import GenerateKeysHandler
from licenses.application.handlers.license_stats_handler import GetLicenseStatsHandler
from licenses.application.handlers.list_keys_handler import ListKeysHandler
from licenses.application.queries.get_license_stats import GetLicenseStatsQuery
from licenses.application.queries.list_keys import ListKeysQuery

tracer = get_tracer(__name__)

ADMIN_KEY_HEADER = OpenApiParameter(
    name="X-Admin-Key",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="Shared admin key",
)


class LicenseKeysView(APIView):
    """View for listing and generating keys."""

    @extend_schema(
        operation_id="list_license_keys",
        summary="List License Keys",
        description="List every key, newest first, with its live binding summary.",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_HEADER],
        responses={200: LicenseKeyListResponseSerializer},
    )
    def get(self, request: Request) -> Response:
        """List license keys."""
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        """Async handler for list keys."""
        with tracer.start_as_current_span("list_license_keys") as span:
            handler = ListKeysHandler(
                license_key_repository=dependencies.license_key_repo,
                activation_repository=dependencies.activation_repo,
            )
            keys = await handler.handle(ListKeysQuery())
            span.set_attribute("keys.count", len(keys))
            return Response(LicenseKeyListResponseSerializer({"keys": keys}).data)

    @extend_schema(
        operation_id="generate_license_keys",
        summary="Generate License Keys",
        description=(
            "Generate 1 to 50 signed keys. The duration is floored to the nearest "
            "bucket (3, 7, 14, 30, 90, 180, 365 days); 0 means lifetime."
        ),
        tags=["Admin API"],
        parameters=[ADMIN_KEY_HEADER],
        request=GenerateKeysRequestSerializer,
        responses={201: GenerateKeysResponseSerializer, 400: {"description": "Bad Request"}},
    )
    def post(self, request: Request) -> Response:
        """Generate license keys."""
        return async_to_sync(self._handle_generate)(request)

    async def _handle_generate(self, request: Request) -> Response:
        """Async handler for generate keys."""
        with tracer.start_as_current_span("generate_license_keys") as span:
            serializer = GenerateKeysRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            data = serializer.validated_data
            handler = GenerateKeysHandler(
                key_codec=dependencies.key_codec(),
                license_key_repository=dependencies.license_key_repo,
                max_keys_per_request=dependencies.license_setting("MAX_KEYS_PER_REQUEST"),
            )
            result = await handler.handle(
                GenerateKeysCommand(
                    tier=LicenseTier(data["tier"]),
                    count=data["count"],
                    duration_days=data["duration_days"],
                    max_activations=data["max_activations"],
                    notes=data["notes"],
                )
            )
            span.set_attribute("keys.count", len(result.keys))
            span.set_status(Status(StatusCode.OK))
            return Response(
                GenerateKeysResponseSerializer(result).data, status=status.HTTP_201_CREATED
            )


class ManageKeyView(APIView):
    """View for admin actions on a single key."""

    @extend_schema(
        operation_id="manage_license_key",
        summary="Manage License Key",
        description=(
            "Apply an admin action: revoke, activate, reset, unbind, delete, "
            "upgrade or downgrade. Upgrade and downgrade take tier and optional "
            "duration_days and max_activations."
        ),
        tags=["Admin API"],
        parameters=[ADMIN_KEY_HEADER],
        request=ManageKeyRequestSerializer,
        responses={
            200: ManageKeyResponseSerializer,
            400: {"description": "Invalid action or payload"},
            404: {"description": "License key not found"},
            409: {"description": "Status change not allowed"},
        },
    )
    def put(self, request: Request, license_key_id: uuid.UUID, action: str) -> Response:
        """Apply an admin action."""
        return async_to_sync(self._handle_manage)(request, license_key_id, action)

    @extend_schema(
        operation_id="manage_license_key_delete",
        summary="Manage License Key (DELETE)",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_HEADER],
        request=ManageKeyRequestSerializer,
        responses={200: ManageKeyResponseSerializer},
    )
    def delete(self, request: Request, license_key_id: uuid.UUID, action: str) -> Response:
        """Apply an admin action sent with DELETE."""
        return async_to_sync(self._handle_manage)(request, license_key_id, action)

    async def _handle_manage(
        self, request: Request, license_key_id: uuid.UUID, action: str
    ) -> Response:
        """Async handler for manage key."""
        with tracer.start_as_current_span("manage_license_key") as span:
            span.set_attribute("license_key.id", str(license_key_id))
            span.set_attribute("admin.action", action)

            try:
                key_action = KeyAction(action)
            except ValueError:
                raise APIError(
                    detail=(
                        "Invalid action. Use: revoke, activate, reset, unbind, "
                        "delete, upgrade, downgrade"
                    ),
                    code="invalid_action",
                )

            serializer = ManageKeyRequestSerializer(data=request.data or {})
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            data = serializer.validated_data
            handler = ManageKeyHandler(
                license_key_repository=dependencies.license_key_repo,
                activation_repository=dependencies.activation_repo,
                audit_log_repository=dependencies.audit_log_repo,
                audit_log=dependencies.audit_log,
            )
            result = await handler.handle(
                ManageKeyCommand(
                    license_key_id=license_key_id,
                    action=key_action,
                    tier=LicenseTier(data["tier"]) if "tier" in data else None,
                    duration_days=data.get("duration_days"),
                    max_activations=data.get("max_activations"),
                )
            )
            span.set_status(Status(StatusCode.OK))
            return Response(ManageKeyResponseSerializer(result).data)


class AuditLogView(APIView):
    """View for browsing the audit trail."""

    @extend_schema(
        operation_id="list_audit_log",
        summary="List Audit Log",
        description="Audit entries, newest first. limit defaults to 50, capped at 200.",
        tags=["Admin API"],
        parameters=[
            ADMIN_KEY_HEADER,
            OpenApiParameter(name="key_id", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="action", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY),
        ],
        responses={200: AuditLogListResponseSerializer},
    )
    def get(self, request: Request) -> Response:
        """List audit log entries."""
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        """Async handler for audit log."""
        with tracer.start_as_current_span("list_audit_log") as span:
            serializer = AuditLogQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            data = serializer.validated_data
            handler = ListAuditLogHandler(
                audit_log_repository=dependencies.audit_log_repo,
                default_limit=dependencies.license_setting("AUDIT_LOG_DEFAULT_LIMIT"),
                max_limit=dependencies.license_setting("AUDIT_LOG_MAX_LIMIT"),
            )
            logs = await handler.handle(
                ListAuditLogQuery(
                    license_key_id=data.get("key_id"),
                    action=AuditAction(data["action"]) if "action" in data else None,
                    limit=data.get("limit"),
                )
            )
            span.set_attribute("logs.count", len(logs))
            return Response(AuditLogListResponseSerializer({"count": len(logs), "logs": logs}).data)


class LicenseStatsView(APIView):
    """View for the admin dashboard counters."""

    @extend_schema(
        operation_id="get_license_stats",
        summary="License Stats",
        description="Key counts by status and tier, bound machines and recent activity.",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_HEADER],
        responses={200: LicenseStatsSerializer},
    )
    def get(self, request: Request) -> Response:
        """Return dashboard counters."""
        return async_to_sync(self._handle_stats)(request)

    async def _handle_stats(self, request: Request) -> Response:
        """Async handler for stats."""
        with tracer.start_as_current_span("get_license_stats"):
            handler = GetLicenseStatsHandler(
                license_key_repository=dependencies.license_key_repo,
                activation_repository=dependencies.activation_repo,
                audit_log_repository=dependencies.audit_log_repo,
            )
            stats = await handler.handle(GetLicenseStatsQuery())
            return Response(LicenseStatsSerializer(stats).data)
