"""Serializers for the rentals API.

Request bodies use the storefront's camelCase keys (``startDate``,
``productId``...) mapped onto snake_case service arguments via ``source``.
"""

from catalog.serializers import ProductListSerializer
from common.fields import CalendarDateField
from common.choices import EventType, RentalStatus
from rest_framework import serializers

from .models import Rental, RentalItem, RentalStatusEvent
from .selectors import available_stock


class EquipmentLineSerializer(serializers.Serializer):
    productId = serializers.IntegerField(min_value=1, source="product_id")
    quantity = serializers.IntegerField(min_value=1)


class PeriodSerializer(serializers.Serializer):
    startDate = CalendarDateField(source="start_date")
    endDate = CalendarDateField(source="end_date")

    def validate(self, attrs):
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError({"endDate": "End date must be after start date."})
        return attrs


class EquipmentQuerySerializer(serializers.Serializer):
    """Optional query params of the equipment listing; dates must come together."""

    category = serializers.CharField(required=False)
    startDate = CalendarDateField(source="start_date", required=False)
    endDate = CalendarDateField(source="end_date", required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if (start is None) != (end is None):
            raise serializers.ValidationError("startDate and endDate must be provided together.")
        if start and end <= start:
            raise serializers.ValidationError({"endDate": "End date must be after start date."})
        return attrs


class QuoteRequestSerializer(PeriodSerializer):
    equipment = EquipmentLineSerializer(many=True, allow_empty=False)
    deliveryRequired = serializers.BooleanField(source="delivery_required", default=False)
    address = serializers.JSONField(required=False, allow_null=True)


class CustomerInfoSerializer(serializers.Serializer):
    firstName = serializers.CharField(source="first_name", max_length=150, required=False, allow_blank=True)
    lastName = serializers.CharField(source="last_name", max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class RentalCreateSerializer(PeriodSerializer):
    equipment = EquipmentLineSerializer(many=True, allow_empty=False)
    deliveryRequired = serializers.BooleanField(source="delivery_required", default=False)
    deliveryAddress = serializers.JSONField(source="delivery_address", required=False, allow_null=True)
    eventType = serializers.ChoiceField(source="event_type", choices=EventType.choices, required=False)
    eventName = serializers.CharField(source="event_name", max_length=200, required=False, allow_blank=True)
    venue = serializers.CharField(max_length=200, required=False, allow_blank=True)
    customerInfo = CustomerInfoSerializer(source="customer", required=False)
    customerNotes = serializers.CharField(source="customer_notes", required=False, allow_blank=True)


class ExtendSerializer(serializers.Serializer):
    newEndDate = CalendarDateField(source="new_end_date")


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RentalStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class RentalItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = RentalItem
        fields = ["id", "product", "name", "daily_rate", "quantity", "total_days", "subtotal"]


class RentalStatusEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = RentalStatusEvent
        fields = ["status", "note", "updated_by", "created_at"]


class RentalSerializer(serializers.ModelSerializer):
    items = RentalItemSerializer(many=True, read_only=True)
    total_days = serializers.IntegerField(read_only=True)

    class Meta:
        model = Rental
        fields = [
            "id",
            "number",
            "user",
            "status",
            "start_date",
            "end_date",
            "actual_start_date",
            "actual_end_date",
            "total_days",
            "delivery_required",
            "delivery_address",
            "event_type",
            "event_name",
            "venue",
            "customer_first_name",
            "customer_last_name",
            "customer_email",
            "customer_phone",
            "items",
            "subtotal",
            "discount_amount",
            "delivery_fee",
            "setup_fee",
            "late_fee",
            "damage_fee",
            "total_amount",
            "deposit_amount",
            "deposit_status",
            "payment_status",
            "customer_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RentalDetailSerializer(RentalSerializer):
    status_history = RentalStatusEventSerializer(many=True, read_only=True)

    class Meta(RentalSerializer.Meta):
        fields = RentalSerializer.Meta.fields + ["status_history"]
        read_only_fields = fields


class RentalAdminSerializer(RentalDetailSerializer):
    class Meta(RentalDetailSerializer.Meta):
        fields = RentalDetailSerializer.Meta.fields + ["internal_notes"]
        read_only_fields = fields


class RentalEquipmentSerializer(ProductListSerializer):
    """Rentable product card; ``availableStock`` is set when a period is in context."""

    availableStock = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ["rental_price_weekly", "rental_price_monthly", "availableStock"]

    def get_availableStock(self, obj) -> int | None:
        start, end = self.context.get("start_date"), self.context.get("end_date")
        if not start or not end:
            return None
        return available_stock(obj, start, end)
