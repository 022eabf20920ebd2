from django.core.management.base import BaseCommand
from rentals.services import mark_overdue_rentals


class Command(BaseCommand):
    help = "Move active rentals whose end date has passed to 'overdue'."

    def handle(self, *args, **options):
        count = mark_overdue_rentals()
        self.stdout.write(self.style.SUCCESS(f"Rentals marked overdue: {count}"))
