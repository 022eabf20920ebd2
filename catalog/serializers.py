"""Public read serializers for the catalog app."""

from rest_framework import serializers

from .models import Product


class ProductListSerializer(serializers.ModelSerializer):
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "category",
            "brand",
            "model",
            "price",
            "original_price",
            "discounted_price",
            "is_on_sale",
            "sale_percentage",
            "is_featured",
            "stock",
            "is_for_rental",
            "rental_price_daily",
            "average_rating",
            "num_reviews",
        ]


class ProductDetailSerializer(ProductListSerializer):
    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            "description",
            "rental_price_weekly",
            "rental_price_monthly",
            "seo_title",
            "seo_description",
            "created_at",
            "updated_at",
        ]
