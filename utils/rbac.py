import logging
from typing import Iterable, Optional

from django.core.exceptions import PermissionDenied

from product_qa.domain.records import Actor

# Canonical role names
ROLE_SELLER = "seller"
ROLE_MODERATOR = "moderator"

# Django auth groups granting the roles
MODERATOR_GROUP = "moderators"
SELLER_GROUP = "sellers"

logger = logging.getLogger(__name__)


def _in_group(user, group_name: str) -> bool:
    if not getattr(user, "is_authenticated", False):
        return False
    return user.groups.filter(name=group_name).exists()


def is_moderator(user) -> bool:
    """Staff, superusers and members of the moderators group review listings."""
    if not getattr(user, "is_authenticated", False):
        return False
    if user.is_superuser or user.is_staff:
        return True
    return _in_group(user, MODERATOR_GROUP)


def is_seller(user) -> bool:
    """Members of the sellers group may submit listings."""
    return _in_group(user, SELLER_GROUP)


def has_role(user, role: str) -> bool:
    if role == ROLE_MODERATOR:
        return is_moderator(user)
    if role == ROLE_SELLER:
        return is_seller(user)
    return False


def has_any_role(user, roles: Iterable[str]) -> bool:
    return any(has_role(user, r) for r in roles)


def require_role(user, roles: Iterable[str]):
    """Raise PermissionDenied unless the user has one of the roles."""
    roles = list(roles)
    if not has_any_role(user, roles):
        logger.warning(
            "RBAC denial: user_id=%s required=%s",
            getattr(user, "id", None),
            roles,
        )
        raise PermissionDenied("Insufficient role to access this resource.")


def actor_for(user, role: Optional[str] = None) -> Actor:
    """
    QA actor for an authenticated user.

    With role given, the user must hold it. Otherwise moderators act as
    moderators and everyone else as a seller.
    """
    if role is not None:
        require_role(user, [role])
    else:
        role = ROLE_MODERATOR if is_moderator(user) else ROLE_SELLER

    if role == ROLE_MODERATOR:
        return Actor.moderator(user.pk)
    return Actor.seller(user.pk)
