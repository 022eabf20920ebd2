from catalog.models import Product
from common.choices import ContactCategory, ContactPriority, ContactResponseMethod, ContactStatus
from django.contrib.auth import get_user_model
from orders.models import Order
from rentals.models import Rental
from rest_framework import serializers

from .models import ContactMessage


class ContactCreateSerializer(serializers.Serializer):
    """Public contact form; camelCase keys map onto model fields."""

    firstName = serializers.CharField(source="first_name", max_length=50)
    lastName = serializers.CharField(source="last_name", max_length=50)
    email = serializers.EmailField()
    phone = serializers.RegexField(r"^\+?[0-9\s-]{9,15}$", required=False, allow_blank=True, max_length=20)
    subject = serializers.CharField(max_length=100)
    message = serializers.CharField(max_length=2000)
    category = serializers.ChoiceField(choices=ContactCategory.choices)
    relatedOrder = serializers.PrimaryKeyRelatedField(
        source="related_order", queryset=Order.objects.all(), required=False, allow_null=True
    )
    relatedRental = serializers.PrimaryKeyRelatedField(
        source="related_rental", queryset=Rental.objects.all(), required=False, allow_null=True
    )
    relatedProduct = serializers.PrimaryKeyRelatedField(
        source="related_product", queryset=Product.objects.all(), required=False, allow_null=True
    )

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class ContactMessageSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    response_time_hours = serializers.FloatField(read_only=True, allow_null=True)

    class Meta:
        model = ContactMessage
        fields = [
            "id",
            "ticket_number",
            "user",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "subject",
            "message",
            "category",
            "priority",
            "status",
            "source",
            "customer_type",
            "related_order",
            "related_rental",
            "related_product",
            "assigned_to",
            "response_message",
            "response_method",
            "responded_by",
            "responded_at",
            "response_time_hours",
            "is_spam",
            "spam_score",
            "ip_address",
            "internal_notes",
            "estimated_response_at",
            "resolved_at",
            "resolution",
            "created_at",
        ]
        read_only_fields = fields


class AssignSerializer(serializers.Serializer):
    assignedTo = serializers.PrimaryKeyRelatedField(
        source="assignee",
        queryset=get_user_model().objects.filter(is_staff=True),
        required=False,
        allow_null=True,
    )


class ReplySerializer(serializers.Serializer):
    message = serializers.CharField(max_length=5000)
    method = serializers.ChoiceField(choices=ContactResponseMethod.choices, default=ContactResponseMethod.EMAIL)


class ResolveSerializer(serializers.Serializer):
    resolution = serializers.CharField(max_length=5000)


class AdminContactFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ContactStatus.choices, required=False)
    category = serializers.ChoiceField(choices=ContactCategory.choices, required=False)
    priority = serializers.ChoiceField(choices=ContactPriority.choices, required=False)
    assignedTo = serializers.IntegerField(source="assigned_to", required=False)
    startDate = serializers.DateField(source="start", required=False)
    endDate = serializers.DateField(source="end", required=False)
    search = serializers.CharField(required=False)
    includeSpam = serializers.BooleanField(source="include_spam", required=False, default=False)
