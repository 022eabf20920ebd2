from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(blank=True, max_length=220, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("guitars", "Guitars"),
                            ("keyboards", "Keyboards"),
                            ("percussion", "Percussion"),
                            ("wind", "Wind"),
                            ("strings", "Strings"),
                            ("sound", "Sound"),
                            ("lighting", "Lighting"),
                            ("accessories", "Accessories"),
                            ("amplifiers", "Amplifiers"),
                            ("microphones", "Microphones"),
                            ("headphones", "Headphones"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("brand", models.CharField(blank=True, db_index=True, max_length=100)),
                ("model", models.CharField(blank=True, max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("original_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("stock", models.IntegerField(default=0)),
                ("is_available", models.BooleanField(db_index=True, default=True)),
                ("is_featured", models.BooleanField(default=False)),
                ("is_on_sale", models.BooleanField(default=False)),
                (
                    "sale_percentage",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("is_for_rental", models.BooleanField(db_index=True, default=False)),
                ("rental_price_daily", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("rental_price_weekly", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("rental_price_monthly", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("average_rating", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=3)),
                ("num_reviews", models.PositiveIntegerField(default=0)),
                ("seo_title", models.CharField(blank=True, max_length=200)),
                ("seo_description", models.TextField(blank=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["category", "is_available"], name="product_category_avail_idx"),
                    models.Index(fields=["is_for_rental", "category"], name="product_rental_category_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(stock__gte=0), name="product_stock_non_negative"),
                    models.CheckConstraint(condition=models.Q(price__gte=0), name="product_price_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(("rental_price_daily__gte", 0), ("rental_price_daily__isnull", True), _connector="OR"),
                        name="product_daily_rate_non_negative",
                    ),
                ],
            },
        ),
    ]
