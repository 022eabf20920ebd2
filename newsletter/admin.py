from django.contrib import admin

from .models import Subscriber
from .services import record_bounce


@admin.register(Subscriber)
class SubscriberAdmin(admin.ModelAdmin):
    list_display = ("email", "full_name", "source", "is_active", "confirmed_at", "bounce_count", "created_at")
    list_filter = ("is_active", "source", "created_at")
    search_fields = ("email", "first_name", "last_name")
    date_hierarchy = "created_at"
    readonly_fields = ("unsubscribe_token", "confirmation_token", "last_email_sent_at", "total_emails_sent")
    actions = ["record_bounces"]

    @admin.action(description="Record a bounced delivery")
    def record_bounces(self, request, queryset):
        for subscriber in queryset:
            record_bounce(subscriber)
