import pytest
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied

from product_qa.domain.records import ActorRole
from product_qa.tests.factories import ModeratorFactory, SellerFactory, UserFactory
from utils.rbac import ROLE_MODERATOR, ROLE_SELLER, actor_for, has_any_role, is_moderator, is_seller, require_role


@pytest.mark.django_db
class TestRoles:
    def test_group_membership(self):
        seller = SellerFactory()
        moderator = ModeratorFactory()

        assert is_seller(seller) and not is_moderator(seller)
        assert is_moderator(moderator) and not is_seller(moderator)

    def test_staff_are_moderators(self):
        assert is_moderator(UserFactory(is_staff=True))

    def test_anonymous_has_no_role(self):
        assert not has_any_role(AnonymousUser(), [ROLE_SELLER, ROLE_MODERATOR])

    def test_require_role(self):
        with pytest.raises(PermissionDenied):
            require_role(SellerFactory(), [ROLE_MODERATOR])


@pytest.mark.django_db
class TestActorFor:
    def test_seller_actor(self):
        seller = SellerFactory()

        actor = actor_for(seller, ROLE_SELLER)

        assert actor.id == str(seller.pk)
        assert actor.role == ActorRole.SELLER

    def test_role_inferred_for_moderator(self):
        moderator = ModeratorFactory()

        assert actor_for(moderator).role == ActorRole.MODERATOR

    def test_requested_role_must_be_held(self):
        with pytest.raises(PermissionDenied):
            actor_for(SellerFactory(), ROLE_MODERATOR)
