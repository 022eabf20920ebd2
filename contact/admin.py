from django.contrib import admin

from .models import ContactMessage


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ("ticket_number", "email", "category", "priority", "status", "is_spam", "assigned_to", "created_at")
    list_filter = ("status", "priority", "category", "is_spam", "created_at")
    search_fields = ("ticket_number", "email", "first_name", "last_name", "subject")
    date_hierarchy = "created_at"
    readonly_fields = ("spam_score", "ip_address", "user_agent", "referrer", "responded_at", "resolved_at")
