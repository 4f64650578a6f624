"""
Django implementation of ActivationRepository port.

This adapter converts between domain entities and Django ORM models.
The one-live-activation invariant is held by the
one_live_activation_per_key partial unique constraint.
"""

import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from activations.domain.activation import Activation
from activations.infrastructure.models import Activation as ActivationModel
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import LiveActivationExistsError
from core.domain.value_objects import MachineId
from core.infrastructure.database import storage_errors


class DjangoActivationRepository(ActivationRepository):
    """
    Django ORM implementation of ActivationRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: ActivationModel) -> Activation:
        """
        Convert Django model to domain entity.

        Args:
            model: Django Activation model

        Returns:
            Activation domain entity
        """
        return Activation(
            id=model.id,
            license_key_id=model.license_key_id,
            machine_id=MachineId(model.machine_id),
            machine_name=model.machine_name,
            app_version=model.app_version,
            ip_address=model.ip_address,
            activated_at=model.activated_at,
            last_seen_at=model.last_seen_at,
            deactivated_at=model.deactivated_at,
        )

    def _to_fields(self, activation: Activation) -> dict:
        """
        Convert domain entity to Django model field values.

        Args:
            activation: Activation domain entity

        Returns:
            Field values keyed by model field name, without the id
        """
        return {
            "license_key_id": activation.license_key_id,
            "machine_id": activation.machine_id.value,
            "machine_name": activation.machine_name,
            "app_version": activation.app_version,
            "ip_address": activation.ip_address,
            "activated_at": activation.activated_at,
            "last_seen_at": activation.last_seen_at,
            "deactivated_at": activation.deactivated_at,
        }

    def _live(self):
        # pylint: disable=no-member
        return ActivationModel.objects.filter(deactivated_at__isnull=True)

    @sync_to_async
    def insert(self, activation: Activation) -> Activation:
        """
        Insert a new live activation.

        Raises:
            LiveActivationExistsError: If the key already has a live activation
        """
        with storage_errors("insert activation"):
            try:
                with transaction.atomic():
                    model = ActivationModel.objects.create(
                        id=activation.id, **self._to_fields(activation)
                    )
            except IntegrityError as exc:
                raise LiveActivationExistsError() from exc
        return self._to_domain(model)

    @sync_to_async
    def save(self, activation: Activation) -> Activation:
        """
        Save an activation entity.

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity
        """
        with storage_errors("save activation"):
            model, _ = ActivationModel.objects.update_or_create(
                id=activation.id, defaults=self._to_fields(activation)
            )
        return self._to_domain(model)

    @sync_to_async
    def find_live_by_license_key(
        self, license_key_id: uuid.UUID
    ) -> Optional[Activation]:
        """
        Find the live activation of a license key.

        Args:
            license_key_id: License key UUID

        Returns:
            Live Activation entity or None if the key is unbound
        """
        with storage_errors("find live activation"):
            model = self._live().filter(license_key_id=license_key_id).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_live_by_license_key_and_machine(
        self, license_key_id: uuid.UUID, machine_id: str
    ) -> Optional[Activation]:
        """
        Find the live activation binding a key to a machine.

        Args:
            license_key_id: License key UUID
            machine_id: Machine identifier

        Returns:
            Live Activation entity or None
        """
        with storage_errors("find live activation"):
            model = (
                self._live()
                .filter(license_key_id=license_key_id, machine_id=machine_id)
                .first()
            )
        return self._to_domain(model) if model else None

    @sync_to_async
    def list_live_by_license_key(
        self, license_key_id: uuid.UUID
    ) -> List[Activation]:
        """List the live activations of a key, earliest first."""
        with storage_errors("list live activations"):
            models = list(
                self._live().filter(license_key_id=license_key_id).order_by("activated_at")
            )
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def list_live_by_license_keys(
        self, license_key_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, List[Activation]]:
        """List live activations of many keys with a single query."""
        with storage_errors("list live activations"):
            models = list(
                self._live()
                .filter(license_key_id__in=list(license_key_ids))
                .order_by("activated_at")
            )
        grouped: Dict[uuid.UUID, List[Activation]] = {}
        for model in models:
            grouped.setdefault(model.license_key_id, []).append(self._to_domain(model))
        return grouped

    @sync_to_async
    def deactivate(
        self, activation: Activation, now: Optional[datetime] = None
    ) -> Activation:
        """
        Release a binding by setting deactivated_at.

        Args:
            activation: Live activation to release
            now: Release time (defaults to current UTC time)

        Returns:
            Deactivated activation entity
        """
        released = activation.deactivate(now)
        with storage_errors("deactivate activation"):
            ActivationModel.objects.filter(id=activation.id).update(
                deactivated_at=released.deactivated_at
            )
        return released

    @sync_to_async
    def count_live(self) -> int:
        """Count live activations across all keys."""
        with storage_errors("count live activations"):
            return self._live().count()

    @sync_to_async
    def delete_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """Delete every activation of a license key."""
        with storage_errors("delete activations"):
            deleted, _ = ActivationModel.objects.filter(
                license_key_id=license_key_id
            ).delete()
        return deleted
