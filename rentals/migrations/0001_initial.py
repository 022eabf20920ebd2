from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

RENTAL_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("preparing", "Preparing"),
    ("ready", "Ready"),
    ("active", "Active"),
    ("overdue", "Overdue"),
    ("returning", "Returning"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]


def money_field():
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Rental",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("number", models.CharField(blank=True, db_index=True, max_length=32, null=True, unique=True)),
                (
                    "status",
                    models.CharField(choices=RENTAL_STATUS_CHOICES, db_index=True, default="pending", max_length=16),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("actual_start_date", models.DateField(blank=True, null=True)),
                ("actual_end_date", models.DateField(blank=True, null=True)),
                ("delivery_required", models.BooleanField(default=False)),
                ("delivery_address", models.JSONField(blank=True, null=True)),
                (
                    "event_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("concert", "Concert"),
                            ("wedding", "Wedding"),
                            ("corporate", "Corporate"),
                            ("party", "Party"),
                            ("festival", "Festival"),
                            ("recording", "Recording"),
                            ("other", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                ("event_name", models.CharField(blank=True, max_length=200)),
                ("venue", models.CharField(blank=True, max_length=200)),
                ("customer_first_name", models.CharField(max_length=150)),
                ("customer_last_name", models.CharField(max_length=150)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(blank=True, max_length=32)),
                ("deposit_amount", money_field()),
                (
                    "deposit_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("returned", "Returned"),
                            ("forfeited", "Forfeited"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("subtotal", money_field()),
                ("discount_amount", money_field()),
                ("delivery_fee", money_field()),
                ("setup_fee", money_field()),
                ("late_fee", money_field()),
                ("damage_fee", money_field()),
                ("total_amount", money_field()),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("partial", "Partial"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("customer_notes", models.TextField(blank=True)),
                ("internal_notes", models.TextField(blank=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rentals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "start_date", "end_date"], name="rental_status_period_idx"),
                    models.Index(fields=["user", "status"], name="rental_user_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))), name="rental_end_after_start"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RentalItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(blank=True, max_length=200)),
                ("daily_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("total_days", models.PositiveIntegerField(default=1)),
                ("subtotal", money_field()),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rental_items",
                        to="catalog.product",
                    ),
                ),
                (
                    "rental",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="rentals.rental"
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [models.Index(fields=["product", "rental"], name="rentalitem_product_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="rentalitem_quantity_positive"),
                    models.CheckConstraint(condition=models.Q(("total_days__gte", 1)), name="rentalitem_days_positive"),
                    models.CheckConstraint(condition=models.Q(("daily_rate__gte", 0)), name="rentalitem_rate_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RentalStatusEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=RENTAL_STATUS_CHOICES, max_length=16)),
                ("note", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "rental",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="rentals.rental",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["created_at", "id"]},
        ),
    ]
