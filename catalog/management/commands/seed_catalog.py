"""Seed a small music-store catalog for local development.

Creates instruments for sale and sound/lighting equipment for rent.
Re-running is idempotent; existing products are reused by slug.
"""

from decimal import Decimal

from catalog.models import Product
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

PRODUCTS = [
    {
        "name": "Fender Player Stratocaster",
        "category": "guitars",
        "brand": "Fender",
        "model": "Player Stratocaster",
        "price": Decimal("749.00"),
        "stock": 6,
        "is_featured": True,
    },
    {
        "name": "Yamaha P-145 Digital Piano",
        "category": "keyboards",
        "brand": "Yamaha",
        "model": "P-145",
        "price": Decimal("499.00"),
        "original_price": Decimal("549.00"),
        "stock": 4,
        "is_on_sale": True,
        "sale_percentage": 10,
    },
    {
        "name": "Shure SM58",
        "category": "microphones",
        "brand": "Shure",
        "model": "SM58",
        "price": Decimal("109.00"),
        "stock": 20,
        "is_for_rental": True,
        "rental_price_daily": Decimal("8.00"),
    },
    {
        "name": "JBL EON715 Powered Speaker",
        "category": "sound",
        "brand": "JBL",
        "model": "EON715",
        "price": Decimal("699.00"),
        "stock": 10,
        "is_for_rental": True,
        "rental_price_daily": Decimal("20.00"),
        "rental_price_weekly": Decimal("110.00"),
    },
    {
        "name": "Chauvet DJ Intimidator Spot 260",
        "category": "lighting",
        "brand": "Chauvet",
        "model": "Intimidator Spot 260",
        "price": Decimal("599.00"),
        "stock": 8,
        "is_for_rental": True,
        "rental_price_daily": Decimal("35.00"),
    },
]


class Command(BaseCommand):
    help = "Seed development catalog data (instruments and rental equipment)"

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for data in PRODUCTS:
            _, was_created = Product.objects.get_or_create(slug=slugify(data["name"]), defaults=data)
            created += int(was_created)
        self.stdout.write(self.style.SUCCESS(f"Catalog seeded: {created} new of {len(PRODUCTS)} products"))
