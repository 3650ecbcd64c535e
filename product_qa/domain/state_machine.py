"""
Transition table for the product QA workflow.

PENDING_DIGITAL_REVIEW -> WAITING_FOR_SAMPLE -> IN_QUALITY_REVIEW -> ACTIVE_VERIFIED
with rejection from either review stage and revision requests from any
non-terminal status. FOR_REVISION has no outgoing transition.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

from .exceptions import TransitionError
from .records import ActorRole, QAStatus, ReviewStage


class QAOperation:
    SUBMIT = "submit"
    APPROVE_FOR_SAMPLE = "approve_for_sample"
    REJECT_DIGITAL = "reject_digital"
    SUBMIT_SAMPLE = "submit_sample"
    PASS_QUALITY = "pass_quality"
    FAIL_QUALITY = "fail_quality"
    REQUEST_REVISION = "request_revision"


NON_TERMINAL_STATUSES = frozenset(
    {
        QAStatus.PENDING_DIGITAL_REVIEW.value,
        QAStatus.WAITING_FOR_SAMPLE.value,
        QAStatus.IN_QUALITY_REVIEW.value,
    }
)


@dataclass(frozen=True)
class TransitionRule:
    operation: str
    sources: FrozenSet[str]
    target: str
    actor_role: str
    requires_reason: bool = False
    rejection_stage: Optional[str] = None


TRANSITIONS: Dict[str, TransitionRule] = {
    rule.operation: rule
    for rule in (
        TransitionRule(
            operation=QAOperation.SUBMIT,
            sources=frozenset(),
            target=QAStatus.PENDING_DIGITAL_REVIEW.value,
            actor_role=ActorRole.SELLER.value,
        ),
        TransitionRule(
            operation=QAOperation.APPROVE_FOR_SAMPLE,
            sources=frozenset({QAStatus.PENDING_DIGITAL_REVIEW.value}),
            target=QAStatus.WAITING_FOR_SAMPLE.value,
            actor_role=ActorRole.MODERATOR.value,
        ),
        TransitionRule(
            operation=QAOperation.REJECT_DIGITAL,
            sources=frozenset({QAStatus.PENDING_DIGITAL_REVIEW.value}),
            target=QAStatus.REJECTED.value,
            actor_role=ActorRole.MODERATOR.value,
            requires_reason=True,
            rejection_stage=ReviewStage.DIGITAL.value,
        ),
        TransitionRule(
            operation=QAOperation.SUBMIT_SAMPLE,
            sources=frozenset({QAStatus.WAITING_FOR_SAMPLE.value}),
            target=QAStatus.IN_QUALITY_REVIEW.value,
            actor_role=ActorRole.SELLER.value,
        ),
        TransitionRule(
            operation=QAOperation.PASS_QUALITY,
            sources=frozenset({QAStatus.IN_QUALITY_REVIEW.value}),
            target=QAStatus.ACTIVE_VERIFIED.value,
            actor_role=ActorRole.MODERATOR.value,
        ),
        TransitionRule(
            operation=QAOperation.FAIL_QUALITY,
            sources=frozenset({QAStatus.IN_QUALITY_REVIEW.value}),
            target=QAStatus.REJECTED.value,
            actor_role=ActorRole.MODERATOR.value,
            requires_reason=True,
            rejection_stage=ReviewStage.PHYSICAL.value,
        ),
        TransitionRule(
            operation=QAOperation.REQUEST_REVISION,
            sources=NON_TERMINAL_STATUSES,
            target=QAStatus.FOR_REVISION.value,
            actor_role=ActorRole.MODERATOR.value,
            requires_reason=True,
        ),
    )
}


def get_rule(operation: str) -> TransitionRule:
    try:
        return TRANSITIONS[operation]
    except KeyError:
        raise ValueError(f"Unknown QA operation: {operation}")


def check_transition(operation: str, current_status: str) -> TransitionRule:
    """Return the rule for operation, or raise TransitionError if current_status is not a source."""
    rule = get_rule(operation)
    if str(current_status) not in rule.sources:
        allowed = ", ".join(sorted(rule.sources)) or "(no record)"
        raise TransitionError(
            f"Cannot {operation} a listing in status {current_status}; requires {allowed}",
            operation=operation,
            current_status=str(current_status),
        )
    return rule


def allowed_operations(status: str, role: str) -> List[str]:
    """Operations the given role may invoke on a record in status, in table order."""
    return [
        rule.operation
        for rule in TRANSITIONS.values()
        if rule.actor_role == str(role) and str(status) in rule.sources
    ]


def revision_stage_for(status: str) -> str:
    """Review stage a revision request belongs to, based on where the record is."""
    if str(status) == QAStatus.IN_QUALITY_REVIEW.value:
        return ReviewStage.PHYSICAL.value
    return ReviewStage.DIGITAL.value


def is_valid_path(statuses: Sequence[str]) -> bool:
    """True if statuses is a walk through the transition table starting at submission."""
    if not statuses:
        return True
    if str(statuses[0]) != QAStatus.PENDING_DIGITAL_REVIEW.value:
        return False
    for current, following in zip(statuses, statuses[1:]):
        if not any(
            str(current) in rule.sources and rule.target == str(following) for rule in TRANSITIONS.values()
        ):
            return False
    return True
