"""Receivers for product QA domain events."""

import logging

from .events import qa_status_changed
from .records import QAStatus


logger = logging.getLogger("product_qa.audit")


def log_status_change(sender, record, previous_status, operation, actor_id, **kwargs):
    """Audit trail entry for every QA status change."""
    if record.status == QAStatus.ACTIVE_VERIFIED:
        logger.info(f"Listing {record.listing_id} is now live (verified by {actor_id})")
    elif record.status == QAStatus.REJECTED:
        logger.info(
            f"Listing {record.listing_id} rejected at {record.rejection_stage} review by {actor_id}: "
            f"{record.rejection_reason}"
        )
    else:
        logger.info(f"Listing {record.listing_id}: {previous_status or '-'} -> {record.status} via {operation}")


def register_product_qa_listeners():
    qa_status_changed.connect(log_status_change, dispatch_uid="product_qa.log_status_change")
