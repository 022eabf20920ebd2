"""Catalog app models.

A single `Product` entity covers both instruments sold in the store and the
sound/lighting equipment offered for rent (``is_for_rental``).
"""

from decimal import ROUND_HALF_UP, Decimal

from common.choices import ProductCategory
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.text import slugify


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Sellable and/or rentable product.

    ``stock`` is the number of units the store owns; rentals never decrement
    it, they reserve units over a date interval instead.
    """

    CATEGORY_CHOICES = ProductCategory.choices

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES, db_index=True)
    brand = models.CharField(max_length=100, blank=True, db_index=True)
    model = models.CharField(max_length=100, blank=True)

    price = models.DecimalField(max_digits=10, decimal_places=2)
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stock = models.IntegerField(default=0)
    is_available = models.BooleanField(default=True, db_index=True)
    is_featured = models.BooleanField(default=False)
    is_on_sale = models.BooleanField(default=False)
    sale_percentage = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    is_for_rental = models.BooleanField(default=False, db_index=True)
    rental_price_daily = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    rental_price_weekly = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    rental_price_monthly = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    num_reviews = models.PositiveIntegerField(default=0)

    seo_title = models.CharField(max_length=200, blank=True)
    seo_description = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
            models.CheckConstraint(
                name="product_daily_rate_non_negative",
                condition=models.Q(rental_price_daily__gte=0) | models.Q(rental_price_daily__isnull=True),
            ),
        ]
        indexes = [
            models.Index(fields=["category", "is_available"], name="product_category_avail_idx"),
            models.Index(fields=["is_for_rental", "category"], name="product_rental_category_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)

    def _unique_slug(self) -> str:
        base = slugify(self.name)[:200] or "product"
        slug, n = base, 2
        while Product.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{n}"
            n += 1
        return slug

    @property
    def discounted_price(self) -> Decimal:
        """Unit selling price after the sale percentage, rounded to cents."""
        if not self.is_on_sale or not self.sale_percentage:
            return self.price
        discount = self.price * Decimal(self.sale_percentage) / Decimal(100)
        return (self.price - discount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def daily_rate(self) -> Decimal:
        return self.rental_price_daily or Decimal("0.00")

    def is_in_stock(self, quantity: int = 1) -> bool:
        return self.is_available and self.stock >= quantity
