# accounting/management/commands/seed_restaurant_chart.py

from django.core.management.base import BaseCommand

from accounting.services.chart_seed import seed_restaurant_chart


class Command(BaseCommand):
    help = "Seed the restaurant Chart of Accounts (idempotent) and make it the active chart"

    def handle(self, *args, **options):
        self.stdout.write("Seeding Restaurant Chart of Accounts...")

        result = seed_restaurant_chart()

        self.stdout.write(
            self.style.SUCCESS(
                f"{result.chart.name} seeded ({result.created} new accounts, {result.updated} updated)."
            )
        )
