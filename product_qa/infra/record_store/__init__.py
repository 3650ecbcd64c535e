"""
QA Record Store
===============

Authoritative persistence for QA records behind a single async interface.
"""

from .django_store import DjangoQARecordStore
from .factory import QARecordStoreFactory
from .interface import QARecordPatch, QARecordStoreInterface
from .memory_store import InMemoryQARecordStore

__all__ = [
    "QARecordStoreInterface",
    "QARecordPatch",
    "DjangoQARecordStore",
    "InMemoryQARecordStore",
    "QARecordStoreFactory",
]
