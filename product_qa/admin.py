from django.contrib import admin

from .models import Listing, ProductQA, SellerNotification


def qa_field_names():
    return [field.name for field in ProductQA._meta.fields]


class ProductQAInline(admin.StackedInline):
    model = ProductQA
    can_delete = False
    extra = 0

    def get_readonly_fields(self, request, obj=None):
        return qa_field_names()

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ["name", "seller_id", "category", "price", "approval_status", "created_at"]
    list_filter = ["approval_status", "category"]
    search_fields = ["name", "seller_id"]
    readonly_fields = ["approval_status", "created_at", "updated_at"]
    inlines = [ProductQAInline]


@admin.register(ProductQA)
class ProductQAAdmin(admin.ModelAdmin):
    """View-only; QA records only change through the transition engine."""

    list_display = ["listing", "status", "logistics_method", "submitted_at", "updated_at"]
    list_filter = ["status", "rejection_stage", "logistics_method"]
    search_fields = ["listing__name", "listing__seller_id"]
    fieldsets = (
        ("Workflow", {"fields": ("listing", "status")}),
        ("Sample Logistics", {"fields": ("logistics_method", "logistics_address", "logistics_notes")}),
        (
            "Review",
            {
                "fields": (
                    "digital_reviewer_id",
                    "digital_review_note",
                    "quality_reviewer_id",
                    "quality_review_note",
                    "rejection_reason",
                    "rejection_stage",
                    "revision_reason",
                    "revision_stage",
                )
            },
        ),
        (
            "Timestamps",
            {
                "fields": (
                    "submitted_at",
                    "digital_reviewed_at",
                    "approved_at",
                    "sample_submitted_at",
                    "quality_reviewed_at",
                    "rejected_at",
                    "revision_requested_at",
                    "updated_at",
                ),
                "classes": ("collapse",),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        return qa_field_names()

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SellerNotification)
class SellerNotificationAdmin(admin.ModelAdmin):
    list_display = ["title", "seller_id", "type", "priority", "is_read", "created_at"]
    list_filter = ["type", "priority", "is_read"]
    search_fields = ["seller_id", "title", "message"]
    readonly_fields = ["created_at"]
