"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "brand", "price", "stock", "is_available", "is_for_rental", "is_featured")
    search_fields = ("name", "slug", "brand", "model")
    list_filter = ("category", "is_available", "is_for_rental", "is_featured", "is_on_sale")
    list_editable = ("stock", "is_available")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("average_rating", "num_reviews", "created_at", "updated_at")
    fieldsets = (
        (None, {"fields": ("name", "slug", "category", "brand", "model", "description")}),
        (
            "Sale",
            {
                "fields": (
                    "price",
                    "original_price",
                    "stock",
                    "is_available",
                    "is_featured",
                    "is_on_sale",
                    "sale_percentage",
                )
            },
        ),
        ("Rental", {"fields": ("is_for_rental", "rental_price_daily", "rental_price_weekly", "rental_price_monthly")}),
        ("SEO", {"fields": ("seo_title", "seo_description")}),
        ("Reviews", {"fields": ("average_rating", "num_reviews", "created_at", "updated_at")}),
    )
