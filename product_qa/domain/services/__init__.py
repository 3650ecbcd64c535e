from .base import BaseService
from .materializer import BUCKET_NAMES, QABuckets, QAViewMaterializer, partition_records
from .notification_dispatcher import NotificationDispatcher, build_notification
from .reconciliation import QAScreenSession, ReconciliationProtocol, ReloadTrigger
from .transition_engine import QATransitionEngine


__all__ = [
    "BaseService",
    "QATransitionEngine",
    "NotificationDispatcher",
    "build_notification",
    "QAViewMaterializer",
    "QABuckets",
    "BUCKET_NAMES",
    "partition_records",
    "ReconciliationProtocol",
    "ReloadTrigger",
    "QAScreenSession",
]
