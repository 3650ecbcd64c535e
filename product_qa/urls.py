from django.urls import include, path
from rest_framework.routers import DefaultRouter

from product_qa.api.metrics_views import product_qa_metrics
from product_qa.api.views import ModeratorQueueView, QARecordViewSet, SellerListingsView, SubmissionView


app_name = "product_qa"

router = DefaultRouter()
router.register(r"records", QARecordViewSet, basename="record")

urlpatterns = [
    path("submissions/", SubmissionView.as_view(), name="submit"),
    path("moderator/queue/", ModeratorQueueView.as_view(), name="moderator-queue"),
    path("seller/listings/", SellerListingsView.as_view(), name="seller-listings"),
    path("metrics/", product_qa_metrics, name="metrics"),
    path("", include(router.urls)),
]
