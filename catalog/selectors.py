"""Selectors for the catalog domain.

Read-only query helpers shared by the catalog API and the rentals listing.
"""

from typing import Iterable, Optional

from django.db.models import Count, QuerySet

from .models import Product


def list_products(*, ordering: Optional[Iterable[str]] = None) -> QuerySet[Product]:
    """Return products visible in the storefront."""

    ordering = list(ordering or ("name",))
    return Product.objects.filter(is_available=True).order_by(*ordering)


def list_rentable_products(*, category: Optional[str] = None) -> QuerySet[Product]:
    """Return available, in-stock products enabled for rental."""

    qs = Product.objects.filter(is_for_rental=True, is_available=True, stock__gt=0)
    if category:
        qs = qs.filter(category=category)
    return qs.order_by("category", "name")


def get_product_by_slug(slug: str) -> Optional[Product]:
    try:
        return Product.objects.get(slug=slug, is_available=True)
    except Product.DoesNotExist:
        return None


def category_counts() -> dict[str, int]:
    """Map category value to number of visible products."""

    rows = Product.objects.filter(is_available=True).values("category").annotate(n=Count("id")).order_by()
    return {row["category"]: row["n"] for row in rows}
