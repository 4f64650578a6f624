"""
Database utilities shared by the Django repositories.
"""

import contextlib
import logging
from typing import Iterator

from django.db import DatabaseError

from core.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """
    Translate database failures into StorageError.

    Usage:
        with storage_errors("find license key"):
            # Database operations
            pass

    Integrity errors the caller expects must be caught inside the block.
    """
    try:
        yield
    except DatabaseError as exc:
        logger.error("Database error during %s: %s", operation, exc, exc_info=True)
        raise StorageError() from exc
