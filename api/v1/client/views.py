"""
Client API views.

These endpoints are called by the desktop application to:
- Activate a key on a machine
- Validate (heartbeat) an existing binding
- Request deactivation, which is always refused
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.activate_license import ActivateLicenseCommand
from activations.application.commands.deactivate_license import DeactivateLicenseCommand
from activations.application.commands.validate_license import ValidateLicenseCommand
from activations.application.dto.activation_dto import ActivationFailureDTO
from activations.application.handlers.activate_license_handler import ActivateLicenseHandler
from activations.application.handlers.deactivate_license_handler import (
    DeactivateLicenseHandler,
)
from activations.application.handlers.validate_license_handler import ValidateLicenseHandler
from api.v1 import dependencies
from api.v1.client.serializers import (
    ActivateLicenseRequestSerializer,
    ActivationFailureSerializer,
    ActivationResultSerializer,
    DeactivateLicenseRequestSerializer,
    ValidateLicenseRequestSerializer,
)
from core.domain.exceptions import (
    VALIDATION_ERRORS,
    KeyFormatError,
    SelfDeactivationNotAllowedError,
    StorageError,
)
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)

FAILURE_STATUS = {
    KeyFormatError: status.HTTP_400_BAD_REQUEST,
    SelfDeactivationNotAllowedError: status.HTTP_403_FORBIDDEN,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

CLIENT_RESPONSES = {
    200: ActivationResultSerializer,
    400: ActivationFailureSerializer,
    503: ActivationFailureSerializer,
}


def _failure(exc, span) -> Response:
    """Render a rejected request in the client failure shape."""
    span.set_attribute("license.outcome", exc.code)
    span.set_status(Status(StatusCode.ERROR, exc.code))
    return Response(
        ActivationFailureSerializer(ActivationFailureDTO.from_exception(exc)).data,
        status=FAILURE_STATUS.get(type(exc), status.HTTP_200_OK),
    )


def _missing_fields() -> Response:
    dto = ActivationFailureDTO(reason="Missing key or machine_id", code="INVALID_REQUEST")
    return Response(ActivationFailureSerializer(dto).data, status=status.HTTP_400_BAD_REQUEST)


class ActivateLicenseView(APIView):
    """View for binding a key to a machine."""

    @extend_schema(
        operation_id="activate_license",
        summary="Activate License",
        description=(
            "Bind a license key to this machine. Activating again from the same "
            "machine refreshes the binding; another machine is rejected until an "
            "admin unbinds the key. Unseen but correctly signed keys are imported."
        ),
        tags=["Client API"],
        request=ActivateLicenseRequestSerializer,
        responses=CLIENT_RESPONSES,
    )
    def post(self, request: Request) -> Response:
        """Activate a license key on a machine."""
        return async_to_sync(self._handle_activate)(request)

    async def _handle_activate(self, request: Request) -> Response:
        """Async handler for activate license."""
        with tracer.start_as_current_span("activate_license") as span:
            span.set_attribute("operation", "activate_license")

            serializer = ActivateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return _missing_fields()

            data = serializer.validated_data
            span.set_attribute("machine_id", data["machine_id"][:8])

            handler = ActivateLicenseHandler(
                key_codec=dependencies.key_codec(),
                license_key_repository=dependencies.license_key_repo,
                activation_repository=dependencies.activation_repo,
                audit_log=dependencies.audit_log,
                bind_attempts=dependencies.license_setting("BIND_RETRY_ATTEMPTS"),
            )
            command = ActivateLicenseCommand(
                license_key=data["key"],
                machine_id=data["machine_id"],
                machine_name=data.get("machine_name"),
                app_version=data.get("app_version"),
                ip_address=dependencies.client_ip(request),
            )

            try:
                result = await handler.handle(command)
            except VALIDATION_ERRORS + (StorageError,) as exc:
                return _failure(exc, span)

            span.set_attribute("license.tier", result.tier)
            span.set_status(Status(StatusCode.OK))
            return Response(ActivationResultSerializer(result).data, status=status.HTTP_200_OK)


class ValidateLicenseView(APIView):
    """View for the periodic license heartbeat."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Confirm that this machine still holds a usable binding and refresh "
            "its last-seen time. Never creates a binding."
        ),
        tags=["Client API"],
        request=ValidateLicenseRequestSerializer,
        responses=CLIENT_RESPONSES,
    )
    def post(self, request: Request) -> Response:
        """Validate a license key on a machine."""
        return async_to_sync(self._handle_validate)(request)

    async def _handle_validate(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")

            serializer = ValidateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return _missing_fields()

            data = serializer.validated_data
            handler = ValidateLicenseHandler(
                key_codec=dependencies.key_codec(),
                license_key_repository=dependencies.license_key_repo,
                activation_repository=dependencies.activation_repo,
            )
            command = ValidateLicenseCommand(
                license_key=data["key"],
                machine_id=data["machine_id"],
                ip_address=dependencies.client_ip(request),
            )

            try:
                result = await handler.handle(command)
            except VALIDATION_ERRORS + (StorageError,) as exc:
                return _failure(exc, span)

            span.set_status(Status(StatusCode.OK))
            return Response(ActivationResultSerializer(result).data, status=status.HTTP_200_OK)


class DeactivateLicenseView(APIView):
    """View for self-deactivation requests."""

    @extend_schema(
        operation_id="deactivate_license",
        summary="Deactivate License",
        description=(
            "Always refused: one key is bound to one machine and only an admin "
            "can unbind it."
        ),
        tags=["Client API"],
        request=DeactivateLicenseRequestSerializer,
        responses={403: ActivationFailureSerializer},
    )
    def post(self, request: Request) -> Response:
        """Refuse a deactivation request."""
        return async_to_sync(self._handle_deactivate)(request)

    async def _handle_deactivate(self, request: Request) -> Response:
        """Async handler for deactivate license."""
        with tracer.start_as_current_span("deactivate_license") as span:
            serializer = DeactivateLicenseRequestSerializer(data=request.data)
            data = serializer.validated_data if serializer.is_valid() else {}

            command = DeactivateLicenseCommand(
                license_key=data.get("key", ""),
                machine_id=data.get("machine_id", ""),
            )
            try:
                await DeactivateLicenseHandler().handle(command)
            except SelfDeactivationNotAllowedError as exc:
                return _failure(exc, span)
