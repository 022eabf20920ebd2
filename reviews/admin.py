from django.contrib import admin

from .models import Review
from .services import approve_review, reject_review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "user", "rating", "status", "is_verified_purchase", "is_reported", "created_at")
    list_filter = ("status", "rating", "is_verified_purchase", "is_reported")
    search_fields = ("title", "comment", "user__email", "product__name")
    raw_id_fields = ("user", "product", "order")
    readonly_fields = ("status", "helpful_votes", "moderated_by", "moderated_at", "reported_at", "responded_at")
    actions = ["approve_selected", "reject_selected"]

    @admin.action(description="Approve selected reviews")
    def approve_selected(self, request, queryset):
        for review in queryset:
            approve_review(review, by=request.user)

    @admin.action(description="Reject selected reviews")
    def reject_selected(self, request, queryset):
        for review in queryset:
            reject_review(review, by=request.user)
