"""
Product QA error taxonomy.

ValidationError, TransitionError and AuthorizationError are raised locally,
before any store call. PersistenceError means the authoritative write or
read failed (including timeouts). NotificationError never reaches callers of
the transition engine; it is logged by the dispatcher.
"""


class QAError(Exception):
    """Base class for product QA errors."""

    code = "qa_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.context = context


class ValidationError(QAError):
    """Malformed input to a transition (empty reason, unknown logistics method)."""

    code = "validation_error"


class AuthorizationError(QAError):
    """The actor's role or ownership does not allow the operation."""

    code = "permission_denied"


class TransitionError(QAError):
    """Operation attempted from a status that is not one of its source states."""

    code = "invalid_transition"

    def __init__(self, message: str = "", operation: str = None, current_status: str = None, **context):
        super().__init__(message, operation=operation, current_status=current_status, **context)
        self.operation = operation
        self.current_status = current_status


class TransitionInProgressError(TransitionError):
    """A transition for the same listing has not resolved yet."""

    code = "transition_in_progress"


class PersistenceError(QAError):
    """The record store rejected, failed or timed out on a call."""

    code = "persistence_error"


class RecordNotFoundError(QAError):
    """No QA record exists for the requested listing."""

    code = "record_not_found"

    def __init__(self, listing_id: str):
        super().__init__(f"No QA record for listing {listing_id}", listing_id=listing_id)
        self.listing_id = listing_id


class DuplicateRecordError(PersistenceError):
    """A QA record already exists for the listing."""

    code = "duplicate_record"


class StaleRecordError(PersistenceError, TransitionError):
    """
    The store refused a compare-and-set write because the stored status no
    longer matches the status the caller validated against.
    """

    code = "stale_record"

    def __init__(self, listing_id: str, expected_status: str, current_status: str):
        message = (
            f"QA record {listing_id} is {current_status}, expected {expected_status}; "
            "reload before retrying"
        )
        QAError.__init__(
            self,
            message,
            listing_id=listing_id,
            expected_status=expected_status,
            current_status=current_status,
        )
        self.listing_id = listing_id
        self.expected_status = expected_status
        self.current_status = current_status
        self.operation = None


class NotificationError(QAError):
    """Seller notification could not be enqueued or delivered."""

    code = "notification_error"
