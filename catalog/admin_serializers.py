"""Admin serializers for write endpoints in the catalog app."""

from rest_framework import serializers

from .models import Product


class ProductAdminSerializer(serializers.ModelSerializer):
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "category",
            "brand",
            "model",
            "price",
            "original_price",
            "discounted_price",
            "stock",
            "is_available",
            "is_featured",
            "is_on_sale",
            "sale_percentage",
            "is_for_rental",
            "rental_price_daily",
            "rental_price_weekly",
            "rental_price_monthly",
            "average_rating",
            "num_reviews",
            "seo_title",
            "seo_description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["average_rating", "num_reviews", "created_at", "updated_at"]
        extra_kwargs = {"slug": {"required": False}}

    def validate_stock(self, value):
        if value < 0:
            raise serializers.ValidationError("Stock cannot be negative.")
        return value

    def validate(self, attrs):
        is_for_rental = attrs.get("is_for_rental", getattr(self.instance, "is_for_rental", False))
        daily = attrs.get("rental_price_daily", getattr(self.instance, "rental_price_daily", None))
        if is_for_rental and daily is None:
            raise serializers.ValidationError({"rental_price_daily": "Rentable products need a daily rate."})
        return attrs
