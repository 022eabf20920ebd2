"""DRF serializers for Orders.

Checkout bodies use camelCase keys mapped onto service arguments; orders are
rendered from their denormalized money columns.
"""

from common.choices import OrderPaymentStatus, OrderStatus, PaymentMethod
from rest_framework import serializers

from .models import Order, OrderItem, OrderStatusEvent


class OrderLineSerializer(serializers.Serializer):
    productId = serializers.IntegerField(min_value=1, source="product_id")
    quantity = serializers.IntegerField(min_value=1, max_value=100)


class ShippingAddressSerializer(serializers.Serializer):
    firstName = serializers.CharField(source="first_name", max_length=150, required=False, allow_blank=True)
    lastName = serializers.CharField(source="last_name", max_length=150, required=False, allow_blank=True)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    postalCode = serializers.CharField(source="postal_code", max_length=20)
    province = serializers.CharField(max_length=120, required=False, allow_blank=True)
    country = serializers.CharField(max_length=2, required=False, default="ES")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderLineSerializer(many=True, allow_empty=False)
    shippingAddress = ShippingAddressSerializer(source="shipping_address", required=False)
    paymentMethod = serializers.ChoiceField(source="payment_method", choices=PaymentMethod.choices)
    requiresPickup = serializers.BooleanField(source="requires_pickup", default=False)
    customerNotes = serializers.CharField(source="customer_notes", required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        if not attrs.get("requires_pickup") and not attrs.get("shipping_address"):
            raise serializers.ValidationError({"shippingAddress": "A shipping address is required unless picking up."})
        return attrs


class CancelSerializer(serializers.Serializer):
    cancelReason = serializers.CharField(source="reason", required=False, allow_blank=True, default="")


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    trackingNumber = serializers.CharField(source="tracking_number", required=False, allow_blank=True, default="")


class AdminOrderFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    paymentStatus = serializers.ChoiceField(source="payment_status", choices=OrderPaymentStatus.choices, required=False)
    startDate = serializers.DateField(source="start", required=False)
    endDate = serializers.DateField(source="end", required=False)
    search = serializers.CharField(required=False)


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class OrderStatusEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusEvent
        fields = ["status", "note", "updated_by", "created_at"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "email",
            "payment_method",
            "payment_status",
            "requires_pickup",
            "shipping_first_name",
            "shipping_last_name",
            "shipping_street",
            "shipping_city",
            "shipping_postal_code",
            "shipping_province",
            "shipping_country",
            "shipping_phone",
            "customer_notes",
            "items",
            "subtotal",
            "tax_amount",
            "shipping_cost",
            "discount_amount",
            "total_amount",
            "tracking_number",
            "cancelled_at",
            "cancel_reason",
            "created_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    status_history = OrderStatusEventSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["user", "status_history"]
        read_only_fields = fields
