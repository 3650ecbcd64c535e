"""
QA Record Store Factory
=======================

Factory pattern for creating record store instances based on configuration.
"""

import logging
from typing import Literal

from django.conf import settings

from .django_store import DjangoQARecordStore
from .interface import QARecordStoreInterface
from .memory_store import InMemoryQARecordStore


logger = logging.getLogger(__name__)

RecordStoreBackend = Literal["django", "memory"]


class QARecordStoreFactory:
    """
    Factory for creating QA record store instances.

    Usage:
        # In settings.py
        PRODUCT_QA = {"RECORD_STORE_BACKEND": "django"}  # or 'memory'

        # In your code
        store = QARecordStoreFactory.create()
    """

    @staticmethod
    def create(backend: RecordStoreBackend | None = None) -> QARecordStoreInterface:
        """
        Create a record store instance.

        Args:
            backend: Store backend type ('django' or 'memory')
                    If None, reads PRODUCT_QA["RECORD_STORE_BACKEND"]

        Returns:
            QARecordStoreInterface implementation

        Raises:
            ValueError: If backend type is invalid
        """
        config = getattr(settings, "PRODUCT_QA", {})
        backend_type = backend or config.get("RECORD_STORE_BACKEND", "django")

        logger.info(f"Creating QA record store backend: {backend_type}")

        if backend_type == "django":
            return DjangoQARecordStore()
        elif backend_type == "memory":
            return InMemoryQARecordStore()
        else:
            raise ValueError(f"Invalid record store backend: {backend_type}. Must be 'django' or 'memory'")
