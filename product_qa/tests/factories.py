import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone
from faker import Faker

from product_qa.domain.records import ApprovalStatus, ListingAttributes, QARecord, QAStatus
from product_qa.models import Listing, ProductQA
from utils.rbac import MODERATOR_GROUP, SELLER_GROUP

User = get_user_model()
fake = Faker()


# ===== Users =====


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class SellerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")

    @factory.post_generation
    def seller_group(self, create, extracted, **kwargs):
        if create:
            self.groups.add(Group.objects.get_or_create(name=SELLER_GROUP)[0])


class ModeratorFactory(UserFactory):
    username = factory.Sequence(lambda n: f"moderator_{n}")
    email = factory.Sequence(lambda n: f"moderator_{n}@example.com")

    @factory.post_generation
    def moderator_group(self, create, extracted, **kwargs):
        if create:
            self.groups.add(Group.objects.get_or_create(name=MODERATOR_GROUP)[0])


# ===== ORM rows =====


class ListingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Listing

    id = factory.LazyFunction(uuid.uuid4)
    seller_id = factory.Sequence(lambda n: str(n + 1))
    name = factory.LazyFunction(lambda: fake.catch_phrase())
    description = factory.LazyFunction(lambda: fake.paragraph())
    price = factory.LazyFunction(lambda: Decimal(str(fake.pydecimal(left_digits=3, right_digits=2, positive=True))))
    category = "Furniture"
    stock = 5


class ProductQAFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductQA

    listing = factory.SubFactory(ListingFactory)
    status = QAStatus.PENDING_DIGITAL_REVIEW.value


# ===== Domain values =====


class ListingAttributesFactory(factory.Factory):
    class Meta:
        model = ListingAttributes

    name = factory.LazyFunction(lambda: fake.catch_phrase())
    price = Decimal("49.90")
    category = "Furniture"
    description = factory.LazyFunction(lambda: fake.sentence())
    images = factory.LazyFunction(lambda: [fake.image_url()])
    stock = 3


class QARecordFactory(factory.Factory):
    class Meta:
        model = QARecord

    listing_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    seller_id = "seller-1"
    status = QAStatus.PENDING_DIGITAL_REVIEW.value
    listing_name = factory.LazyFunction(lambda: fake.catch_phrase())
    approval_status = ApprovalStatus.PENDING.value
    submitted_at = factory.LazyFunction(timezone.now)
    updated_at = factory.LazyFunction(timezone.now)
