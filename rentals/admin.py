"""Admin registration for rentals."""

from django.contrib import admin

from .models import Rental, RentalItem, RentalStatusEvent


class RentalItemInline(admin.TabularInline):
    model = RentalItem
    extra = 0
    fields = ("product", "name", "daily_rate", "quantity", "total_days", "subtotal")
    raw_id_fields = ("product",)


class RentalStatusEventInline(admin.TabularInline):
    model = RentalStatusEvent
    extra = 0
    fields = ("status", "note", "updated_by", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    list_display = ("number", "customer_email", "status", "start_date", "end_date", "total_amount", "payment_status")
    list_filter = ("status", "payment_status", "deposit_status", "delivery_required", "event_type")
    search_fields = ("number", "customer_email", "customer_last_name", "event_name")
    date_hierarchy = "start_date"
    # Status goes through the API so the transition table and history apply
    readonly_fields = ("number", "status", "actual_start_date", "actual_end_date", "created_at", "updated_at")
    raw_id_fields = ("user",)
    inlines = [RentalItemInline, RentalStatusEventInline]
